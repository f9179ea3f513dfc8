"""API v1 router."""
from fastapi import APIRouter

from app.api.v1 import auth, exports, folder, materials, objectives, plans, questions, quiz

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(folder.router, prefix="/folders", tags=["Folders"])
api_router.include_router(materials.router, tags=["Materials"])
api_router.include_router(quiz.router, tags=["Quizzes"])
api_router.include_router(objectives.router, tags=["Learning Objectives"])
api_router.include_router(plans.router, tags=["Generation Plans"])
api_router.include_router(questions.router, tags=["Questions"])
api_router.include_router(exports.router, tags=["Exports"])
