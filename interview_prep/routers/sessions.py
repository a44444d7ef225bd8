from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from interview_prep.schemas import QuestionOut, SessionCreateIn, SessionEnvelope, SessionOut
from interview_prep.services.prompts import language_from_header
from interview_prep.services.session_manager import SessionManager, SessionState
from interview_prep.routers.deps import get_session_manager


logger = logging.getLogger(__name__)

router = APIRouter()


def session_out(state: SessionState) -> SessionOut:
	out = SessionOut.model_validate(state, from_attributes=True)
	out.questions = [QuestionOut.model_validate(q, from_attributes=True) for q in state.ordered_questions()]
	return out


@router.post("/create", response_model=SessionEnvelope, status_code=201)
async def create_session(
	payload: SessionCreateIn,
	accept_language: Optional[str] = Header(default=None),
	sessions: SessionManager = Depends(get_session_manager),
):
	state = await sessions.create_session(
		role=payload.role,
		experience=payload.experience,
		topics_to_focus=payload.topics_to_focus,
		description=payload.description,
		language=language_from_header(accept_language),
		questions=[(q.question, q.answer) for q in payload.questions],
	)
	logger.info(
		"Session created: %s - Role: %s - Questions: %d",
		state.session_id, state.role, len(state.questions),
	)
	return SessionEnvelope(session=session_out(state))


@router.get("/my-sessions", response_model=List[SessionOut])
async def get_my_sessions(sessions: SessionManager = Depends(get_session_manager)):
	items = await sessions.list_sessions()
	logger.info("Fetched %d sessions", len(items))
	return [session_out(s) for s in items]


@router.get("/{session_id}", response_model=SessionEnvelope)
async def get_session_by_id(session_id: str, sessions: SessionManager = Depends(get_session_manager)):
	try:
		state = await sessions.get_required(session_id)
	except KeyError:
		logger.warning("Session not found: %s", session_id)
		raise HTTPException(status_code=404, detail="Session not found")
	return SessionEnvelope(session=session_out(state))


@router.delete("/{session_id}")
async def delete_session(session_id: str, sessions: SessionManager = Depends(get_session_manager)):
	deleted = await sessions.delete_session(session_id)
	if not deleted:
		logger.warning("Delete attempt - Session not found: %s", session_id)
		raise HTTPException(status_code=404, detail="Session not found")
	logger.info("Session deleted: %s", session_id)
	return {"message": "Session deleted successfully"}
