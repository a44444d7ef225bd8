import pytest
from fastapi.testclient import TestClient

from interview_prep.config import settings
from interview_prep.main import app
from interview_prep.routers.deps import get_llm_service, get_session_manager
from interview_prep.services.llm_service import LLMService
from interview_prep.services.session_manager import SessionManager


class FakeLLMService(LLMService):
	"""Returns canned completions instead of calling a provider."""

	def __init__(self, replies=None, error=None) -> None:
		super().__init__()
		self.replies = list(replies or [])
		self.error = error
		self.prompts = []

	async def complete(self, prompt: str) -> str:
		self.prompts.append(prompt)
		if self.error is not None:
			raise self.error
		return self.replies.pop(0)


@pytest.fixture
def session_store(tmp_path):
	return SessionManager(tmp_path / "sessions")


@pytest.fixture
def fake_llm():
	return FakeLLMService()


@pytest.fixture
def client(monkeypatch, session_store, fake_llm):
	monkeypatch.setattr(settings, "api_key", None)
	app.dependency_overrides[get_session_manager] = lambda: session_store
	app.dependency_overrides[get_llm_service] = lambda: fake_llm
	with TestClient(app) as c:
		yield c
	app.dependency_overrides.clear()
