"""create authoring tables

Revision ID: 7c2f4a9d1e05
Revises:
Create Date: 2026-10-18 09:12:40.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '7c2f4a9d1e05'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('username', sa.String(), nullable=True),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('hashed_password', sa.String(), nullable=True),
        sa.Column('role', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)

    op.create_table('folders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('instructor_id', sa.Integer(), nullable=False),
        sa.Column('total_quizzes', sa.Integer(), nullable=False),
        sa.Column('total_materials', sa.Integer(), nullable=False),
        sa.Column('total_questions', sa.Integer(), nullable=False),
        sa.Column('last_activity', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['instructor_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('instructor_id', 'name', name='uq_folders_instructor_name')
    )
    op.create_index(op.f('ix_folders_id'), 'folders', ['id'], unique=False)
    op.create_index(op.f('ix_folders_instructor_id'), 'folders', ['instructor_id'], unique=False)

    op.create_table('materials',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('original_filename', sa.String(), nullable=True),
        sa.Column('file_path', sa.String(), nullable=True),
        sa.Column('url', sa.String(), nullable=True),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('mime_type', sa.String(), nullable=True),
        sa.Column('checksum', sa.String(), nullable=True),
        sa.Column('folder_id', sa.Integer(), nullable=False),
        sa.Column('uploaded_by', sa.Integer(), nullable=False),
        sa.Column('processing_status', sa.String(), nullable=True),
        sa.Column('processing_error', sa.JSON(), nullable=True),
        sa.Column('times_used_in_quiz', sa.Integer(), nullable=False),
        sa.Column('last_used', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['folder_id'], ['folders.id'], ),
        sa.ForeignKeyConstraint(['uploaded_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('folder_id', 'checksum', name='uq_materials_folder_checksum')
    )
    op.create_index(op.f('ix_materials_id'), 'materials', ['id'], unique=False)
    op.create_index(op.f('ix_materials_type'), 'materials', ['type'], unique=False)
    op.create_index(op.f('ix_materials_checksum'), 'materials', ['checksum'], unique=False)
    op.create_index(op.f('ix_materials_folder_id'), 'materials', ['folder_id'], unique=False)
    op.create_index(op.f('ix_materials_uploaded_by'), 'materials', ['uploaded_by'], unique=False)
    op.create_index(op.f('ix_materials_processing_status'), 'materials', ['processing_status'], unique=False)

    # active_plan_id points at generation_plans, which is created afterwards
    op.create_table('quizzes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('folder_id', sa.Integer(), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=False),
        sa.Column('active_plan_id', sa.Integer(), nullable=True),
        sa.Column('settings', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(), nullable=True),
        sa.Column('progress_materials_assigned', sa.Boolean(), nullable=False),
        sa.Column('progress_objectives_set', sa.Boolean(), nullable=False),
        sa.Column('progress_plan_generated', sa.Boolean(), nullable=False),
        sa.Column('progress_plan_approved', sa.Boolean(), nullable=False),
        sa.Column('progress_questions_generated', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['folder_id'], ['folders.id'], ),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('folder_id', 'name', name='uq_quizzes_folder_name')
    )
    op.create_index(op.f('ix_quizzes_id'), 'quizzes', ['id'], unique=False)
    op.create_index(op.f('ix_quizzes_folder_id'), 'quizzes', ['folder_id'], unique=False)
    op.create_index(op.f('ix_quizzes_created_by'), 'quizzes', ['created_by'], unique=False)
    op.create_index(op.f('ix_quizzes_status'), 'quizzes', ['status'], unique=False)

    op.create_table('quiz_materials',
        sa.Column('quiz_id', sa.Integer(), nullable=False),
        sa.Column('material_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['material_id'], ['materials.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('quiz_id', 'material_id')
    )

    op.create_table('learning_objectives',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('quiz_id', sa.Integer(), nullable=False),
        sa.Column('text', sa.String(length=500), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.Column('generated_from', sa.JSON(), nullable=True),
        sa.Column('is_ai_generated', sa.Boolean(), nullable=False),
        sa.Column('llm_model', sa.String(), nullable=True),
        sa.Column('generation_prompt', sa.Text(), nullable=True),
        sa.Column('confidence', sa.Float(), nullable=True),
        sa.Column('processing_time', sa.Integer(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_learning_objectives_id'), 'learning_objectives', ['id'], unique=False)
    op.create_index(op.f('ix_learning_objectives_quiz_id'), 'learning_objectives', ['quiz_id'], unique=False)
    op.create_index(op.f('ix_learning_objectives_created_by'), 'learning_objectives', ['created_by'], unique=False)

    op.create_table('objective_edits',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('objective_id', sa.Integer(), nullable=False),
        sa.Column('edited_by', sa.Integer(), nullable=False),
        sa.Column('edited_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('changes', sa.Text(), nullable=True),
        sa.Column('previous_text', sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(['objective_id'], ['learning_objectives.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['edited_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_objective_edits_id'), 'objective_edits', ['id'], unique=False)
    op.create_index(op.f('ix_objective_edits_objective_id'), 'objective_edits', ['objective_id'], unique=False)

    op.create_table('generation_plans',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('quiz_id', sa.Integer(), nullable=False),
        sa.Column('approach', sa.String(), nullable=False),
        sa.Column('questions_per_lo', sa.Integer(), nullable=False),
        sa.Column('total_questions', sa.Integer(), nullable=False),
        sa.Column('breakdown', sa.JSON(), nullable=False),
        sa.Column('distribution', sa.JSON(), nullable=False),
        sa.Column('generation_metadata', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_generation_plans_id'), 'generation_plans', ['id'], unique=False)
    op.create_index(op.f('ix_generation_plans_quiz_id'), 'generation_plans', ['quiz_id'], unique=False)
    op.create_index(op.f('ix_generation_plans_approach'), 'generation_plans', ['approach'], unique=False)
    op.create_index(op.f('ix_generation_plans_status'), 'generation_plans', ['status'], unique=False)
    op.create_index(op.f('ix_generation_plans_created_by'), 'generation_plans', ['created_by'], unique=False)
    op.create_foreign_key(
        'fk_quizzes_active_plan', 'quizzes', 'generation_plans',
        ['active_plan_id'], ['id'], ondelete='SET NULL'
    )

    op.create_table('plan_modifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('plan_id', sa.Integer(), nullable=False),
        sa.Column('modified_by', sa.Integer(), nullable=False),
        sa.Column('modified_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('changes', sa.Text(), nullable=True),
        sa.Column('previous_breakdown', sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(['plan_id'], ['generation_plans.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['modified_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_plan_modifications_id'), 'plan_modifications', ['id'], unique=False)
    op.create_index(op.f('ix_plan_modifications_plan_id'), 'plan_modifications', ['plan_id'], unique=False)

    op.create_table('questions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('quiz_id', sa.Integer(), nullable=False),
        sa.Column('learning_objective_id', sa.Integer(), nullable=False),
        sa.Column('generation_plan_id', sa.Integer(), nullable=True),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('difficulty', sa.String(), nullable=False),
        sa.Column('question_text', sa.Text(), nullable=False),
        sa.Column('content', sa.JSON(), nullable=False),
        sa.Column('correct_answer', sa.JSON(), nullable=True),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.Column('generation_metadata', sa.JSON(), nullable=True),
        sa.Column('review_status', sa.String(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ),
        sa.ForeignKeyConstraint(['learning_objective_id'], ['learning_objectives.id'], ),
        sa.ForeignKeyConstraint(['generation_plan_id'], ['generation_plans.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_questions_id'), 'questions', ['id'], unique=False)
    op.create_index(op.f('ix_questions_quiz_id'), 'questions', ['quiz_id'], unique=False)
    op.create_index(op.f('ix_questions_learning_objective_id'), 'questions', ['learning_objective_id'], unique=False)
    op.create_index(op.f('ix_questions_generation_plan_id'), 'questions', ['generation_plan_id'], unique=False)
    op.create_index(op.f('ix_questions_type'), 'questions', ['type'], unique=False)
    op.create_index(op.f('ix_questions_review_status'), 'questions', ['review_status'], unique=False)
    op.create_index(op.f('ix_questions_created_by'), 'questions', ['created_by'], unique=False)

    op.create_table('question_edits',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('question_id', sa.Integer(), nullable=False),
        sa.Column('edited_by', sa.Integer(), nullable=False),
        sa.Column('edited_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('changes', sa.Text(), nullable=True),
        sa.Column('previous_version', sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(['question_id'], ['questions.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['edited_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_question_edits_id'), 'question_edits', ['id'], unique=False)
    op.create_index(op.f('ix_question_edits_question_id'), 'question_edits', ['question_id'], unique=False)

    op.create_table('generation_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('quiz_id', sa.Integer(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('approach', sa.String(), nullable=True),
        sa.Column('questions_generated', sa.Integer(), nullable=False),
        sa.Column('processing_time', sa.Integer(), nullable=True),
        sa.Column('llm_model', sa.String(), nullable=True),
        sa.Column('success', sa.Boolean(), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_generation_records_id'), 'generation_records', ['id'], unique=False)
    op.create_index(op.f('ix_generation_records_quiz_id'), 'generation_records', ['quiz_id'], unique=False)

    op.create_table('quiz_exports',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('quiz_id', sa.Integer(), nullable=False),
        sa.Column('export_id', sa.String(length=64), nullable=False),
        sa.Column('format', sa.String(), nullable=False),
        sa.Column('file_path', sa.String(), nullable=False),
        sa.Column('filename', sa.String(), nullable=False),
        sa.Column('content_length', sa.Integer(), nullable=False),
        sa.Column('download_count', sa.Integer(), nullable=False),
        sa.Column('exported_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_quiz_exports_id'), 'quiz_exports', ['id'], unique=False)
    op.create_index(op.f('ix_quiz_exports_quiz_id'), 'quiz_exports', ['quiz_id'], unique=False)
    op.create_index(op.f('ix_quiz_exports_export_id'), 'quiz_exports', ['export_id'], unique=True)


def downgrade() -> None:
    """Downgrade schema."""
    # Children first
    op.drop_table('quiz_exports')
    op.drop_table('generation_records')
    op.drop_table('question_edits')
    op.drop_table('questions')
    op.drop_table('plan_modifications')
    op.drop_constraint('fk_quizzes_active_plan', 'quizzes', type_='foreignkey')
    op.drop_table('generation_plans')
    op.drop_table('objective_edits')
    op.drop_table('learning_objectives')
    op.drop_table('quiz_materials')
    op.drop_table('quizzes')
    op.drop_table('materials')
    op.drop_table('folders')
    op.drop_table('users')
