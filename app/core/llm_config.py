import os
from typing import Optional
from langchain_openai import ChatOpenAI
from pydantic import SecretStr
from app.core.config import settings

class LLMFactory:
    """Factory for creating configured LLM instances with tracing."""

    @staticmethod
    def create_llm(
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        json_mode: bool = True,
        tracing_project: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 60.0,
    ) -> ChatOpenAI:
        """
        Create a configured ChatOpenAI instance.

        Args:
            model: The model name to use (defaults to settings.LLM_MODEL).
            temperature: The temperature for generation (defaults to settings.LLM_TEMPERATURE).
            json_mode: Ask the model for a JSON object response.
            tracing_project: The LangSmith project name for tracing.
            api_key: OpenAI API key (optional, defaults to settings).
            timeout: Request timeout in seconds.
        """
        if settings.LANGSMITH_TRACING:
            os.environ["LANGCHAIN_TRACING_V2"] = "true"
            os.environ["LANGCHAIN_ENDPOINT"] = settings.LANGSMITH_ENDPOINT
            os.environ["LANGCHAIN_API_KEY"] = settings.LANGSMITH_API_KEY
            os.environ["LANGCHAIN_PROJECT"] = tracing_project or settings.LANGSMITH_PROJECT

        model_kwargs = {"response_format": {"type": "json_object"}} if json_mode else {}

        return ChatOpenAI(
            model=model or settings.LLM_MODEL,
            api_key=SecretStr(api_key or settings.OPENAI_API_KEY),
            temperature=settings.LLM_TEMPERATURE if temperature is None else temperature,
            timeout=timeout,
            max_retries=0,
            model_kwargs=model_kwargs,
        )
