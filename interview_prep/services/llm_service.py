from __future__ import annotations

import logging
from typing import Any, Dict, List

import anyio
from groq import Groq
from pydantic import TypeAdapter, ValidationError
try:
    import google.generativeai as genai
except Exception:
    genai = None

from interview_prep.config import settings
from interview_prep.schemas import ConceptExplanation, QuestionAnswer
from interview_prep.services.prompts import concept_explain_prompt, question_answer_prompt
from interview_prep.utils.json_extract import extract_structured_value


logger = logging.getLogger(__name__)

_QUESTION_LIST = TypeAdapter(List[QuestionAnswer])


class LLMUnavailableError(RuntimeError):
	"""No provider is configured (missing API key or unknown provider)."""


class LLMProviderError(RuntimeError):
	"""The provider call failed or returned no content."""


class ResponseShapeError(ValueError):
	"""The model returned valid JSON of the wrong shape."""


class LLMService:
	def __init__(self) -> None:
		self._client: Any = None

	def _ensure_client(self):
		provider = (settings.llm_provider or "groq").lower()
		if provider == "groq":
			api_key = settings.groq_api_key
			if not api_key:
				self._client = None
				return None
			if self._client is None or not isinstance(self._client, Groq):
				self._client = Groq(api_key=api_key)
			return self._client
		elif provider == "gemini":
			if genai is None:
				return None
			api_key = settings.gemini_api_key
			if not api_key:
				return None
			# For gemini we return a configured module handle to keep usage simple
			genai.configure(api_key=api_key)
			return genai
		else:
			return None

	@property
	def provider(self) -> str:
		return (settings.llm_provider or "groq").lower()

	@property
	def enabled(self) -> bool:
		if self.provider == "groq":
			return bool(settings.groq_api_key)
		if self.provider == "gemini":
			return genai is not None and bool(settings.gemini_api_key)
		return False

	async def complete(self, prompt: str) -> str:
		"""Send a single-turn prompt and return the raw message content."""
		client = self._ensure_client()
		if client is None:
			raise LLMUnavailableError(f"LLM provider '{self.provider}' is not configured")

		provider = self.provider
		content = prompt.replace("\n", " ").strip()

		def _call() -> str:
			if provider == "groq":
				kwargs: Dict[str, Any] = {
					"model": settings.groq_model,
					"messages": [{"role": "user", "content": content}],
					"temperature": settings.answer_temperature,
				}
				if settings.groq_max_tokens is not None:
					kwargs["max_tokens"] = settings.groq_max_tokens
				resp = client.chat.completions.create(**kwargs)
				return resp.choices[0].message.content or ""
			gmodel = client.GenerativeModel(settings.gemini_model)
			resp = gmodel.generate_content(content)
			return getattr(resp, "text", None) or (resp.candidates[0].content.parts[0].text if getattr(resp, "candidates", None) else "")

		try:
			text = await anyio.to_thread.run_sync(_call)
		except Exception as exc:
			logger.error("LLM provider %s call failed: %s", provider, exc)
			raise LLMProviderError(str(exc) or f"{provider} API error") from exc

		if not text.strip():
			raise LLMProviderError(f"{provider} returned an empty response")
		return text

	async def generate_questions(
		self,
		role: str,
		experience: str,
		topics_to_focus: str,
		number_of_questions: int,
		language: str = "en",
	) -> List[QuestionAnswer]:
		prompt = question_answer_prompt(role, experience, topics_to_focus, number_of_questions, language)
		raw = await self.complete(prompt)
		data = extract_structured_value(raw, logger, preview_chars=settings.json_preview_chars)
		try:
			return _QUESTION_LIST.validate_python(data)
		except ValidationError as exc:
			raise ResponseShapeError(f"Expected a list of question/answer objects: {exc.error_count()} error(s)") from exc

	async def generate_explanation(self, question: str, language: str = "en") -> ConceptExplanation:
		raw = await self.complete(concept_explain_prompt(question, language))
		data = extract_structured_value(raw, logger, preview_chars=settings.json_preview_chars)
		try:
			return ConceptExplanation.model_validate(data)
		except ValidationError as exc:
			raise ResponseShapeError(f"Expected an object with title and explanation: {exc.error_count()} error(s)") from exc


llm_service = LLMService()
