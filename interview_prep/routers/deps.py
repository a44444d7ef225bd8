from __future__ import annotations

from interview_prep.services.llm_service import LLMService, llm_service
from interview_prep.services.session_manager import SessionManager, session_manager


def get_llm_service() -> LLMService:
	return llm_service


def get_session_manager() -> SessionManager:
	return session_manager
