from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple
import asyncio
import json
import logging
import uuid
from pathlib import Path

from interview_prep.config import settings


logger = logging.getLogger(__name__)


def _now() -> datetime:
	return datetime.now(timezone.utc)


def _parse_dt(value: object, field_name: str = "timestamp") -> datetime:
	if isinstance(value, str):
		try:
			return datetime.fromisoformat(value)
		except ValueError:
			pass
	logger.warning("Unreadable %s %r in stored session, using current time", field_name, value)
	return _now()


@dataclass
class QuestionState:
	question_id: str
	session_id: str
	question: str
	answer: str
	note: str = ""
	is_pinned: bool = False
	created_at: datetime = field(default_factory=_now)
	updated_at: datetime = field(default_factory=_now)


@dataclass
class SessionState:
	session_id: str
	role: str
	experience: str
	topics_to_focus: str
	description: Optional[str] = None
	language: str = "en"
	questions: List[QuestionState] = field(default_factory=list)
	created_at: datetime = field(default_factory=_now)
	updated_at: datetime = field(default_factory=_now)

	def ordered_questions(self) -> List[QuestionState]:
		"""Pinned questions first, then oldest first."""
		return sorted(self.questions, key=lambda q: (not q.is_pinned, q.created_at))


class SessionManager:
	"""Interview prep sessions persisted as one JSON document per session."""

	def __init__(self, data_dir: Path) -> None:
		self._sessions: Dict[str, SessionState] = {}
		# question_id -> session_id
		self._question_index: Dict[str, str] = {}
		self._lock = asyncio.Lock()
		self._data_dir = Path(data_dir)
		self._load_all()

	def _session_path(self, session_id: str) -> Path:
		return self._data_dir / f"{session_id}.json"

	def _serialize(self, state: SessionState) -> dict:
		data = asdict(state)
		data["created_at"] = state.created_at.isoformat()
		data["updated_at"] = state.updated_at.isoformat()
		for raw, question in zip(data["questions"], state.questions):
			raw["created_at"] = question.created_at.isoformat()
			raw["updated_at"] = question.updated_at.isoformat()
		return data

	def _deserialize(self, data: dict) -> SessionState:
		session_id = data["session_id"]
		questions = [
			QuestionState(
				question_id=q["question_id"],
				session_id=session_id,
				question=q.get("question", ""),
				answer=q.get("answer", ""),
				note=q.get("note") or "",
				is_pinned=bool(q.get("is_pinned", False)),
				created_at=_parse_dt(q.get("created_at"), "question created_at"),
				updated_at=_parse_dt(q.get("updated_at"), "question updated_at"),
			)
			for q in data.get("questions", [])
		]
		return SessionState(
			session_id=session_id,
			role=data.get("role", ""),
			experience=data.get("experience", ""),
			topics_to_focus=data.get("topics_to_focus", ""),
			description=data.get("description"),
			language=data.get("language", "en"),
			questions=questions,
			created_at=_parse_dt(data.get("created_at"), "created_at"),
			updated_at=_parse_dt(data.get("updated_at"), "updated_at"),
		)

	def _index(self, state: SessionState) -> None:
		self._sessions[state.session_id] = state
		for question in state.questions:
			self._question_index[question.question_id] = state.session_id

	def _load_all(self) -> None:
		if not self._data_dir.is_dir():
			return
		for p in self._data_dir.glob("*.json"):
			try:
				with p.open("r", encoding="utf-8") as f:
					self._index(self._deserialize(json.load(f)))
			except (OSError, ValueError, KeyError) as exc:
				logger.warning("Skipping unreadable session file %s: %s", p.name, exc)

	def _save(self, state: SessionState) -> None:
		self._data_dir.mkdir(parents=True, exist_ok=True)
		path = self._session_path(state.session_id)
		with path.open("w", encoding="utf-8") as f:
			json.dump(self._serialize(state), f, ensure_ascii=False, indent=2)

	def _new_questions(self, session_id: str, items: Iterable[Tuple[str, str]]) -> List[QuestionState]:
		return [
			QuestionState(question_id=str(uuid.uuid4()), session_id=session_id, question=q, answer=a)
			for q, a in items
		]

	async def create_session(
		self,
		role: str,
		experience: str,
		topics_to_focus: str,
		description: Optional[str] = None,
		language: str = "en",
		questions: Iterable[Tuple[str, str]] = (),
	) -> SessionState:
		async with self._lock:
			session_id = str(uuid.uuid4())
			state = SessionState(
				session_id=session_id,
				role=role,
				experience=experience,
				topics_to_focus=topics_to_focus,
				description=description,
				language=language,
			)
			state.questions = self._new_questions(session_id, questions)
			self._index(state)
			self._save(state)
			return state

	async def get(self, session_id: str) -> Optional[SessionState]:
		return self._sessions.get(session_id)

	async def get_required(self, session_id: str) -> SessionState:
		state = await self.get(session_id)
		if state is None:
			raise KeyError("session not found")
		return state

	async def list_sessions(self) -> List[SessionState]:
		# Newest first
		return sorted(self._sessions.values(), key=lambda s: s.created_at, reverse=True)

	async def delete_session(self, session_id: str) -> bool:
		"""Delete a session, its questions and its persisted file. Returns True if deleted."""
		async with self._lock:
			state = self._sessions.pop(session_id, None)
			if state is None:
				return False
			for question in state.questions:
				self._question_index.pop(question.question_id, None)
			self._session_path(session_id).unlink(missing_ok=True)
			return True

	async def add_questions(self, session_id: str, items: Iterable[Tuple[str, str]]) -> List[QuestionState]:
		async with self._lock:
			state = await self.get_required(session_id)
			created = self._new_questions(session_id, items)
			state.questions.extend(created)
			state.updated_at = _now()
			self._index(state)
			self._save(state)
			return created

	async def find_question(self, question_id: str) -> Tuple[SessionState, QuestionState]:
		session_id = self._question_index.get(question_id)
		state = self._sessions.get(session_id) if session_id else None
		if state is not None:
			for question in state.questions:
				if question.question_id == question_id:
					return state, question
		raise KeyError("question not found")

	async def toggle_pin(self, question_id: str) -> QuestionState:
		async with self._lock:
			state, question = await self.find_question(question_id)
			question.is_pinned = not question.is_pinned
			question.updated_at = _now()
			self._save(state)
			return question

	async def update_note(self, question_id: str, note: Optional[str]) -> QuestionState:
		async with self._lock:
			state, question = await self.find_question(question_id)
			question.note = note or ""
			question.updated_at = _now()
			self._save(state)
			return question


session_manager = SessionManager(Path(settings.data_dir) / "sessions")
