from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from interview_prep.schemas import AddQuestionsIn, NoteIn, QuestionEnvelope, QuestionOut
from interview_prep.services.session_manager import SessionManager
from interview_prep.routers.deps import get_session_manager


router = APIRouter()


@router.post("/add", response_model=List[QuestionOut], status_code=201)
async def add_questions_to_session(payload: AddQuestionsIn, sessions: SessionManager = Depends(get_session_manager)):
	if not payload.session_id or payload.questions is None:
		raise HTTPException(status_code=400, detail="Invalid input data")
	try:
		created = await sessions.add_questions(
			payload.session_id,
			[(q.question, q.answer) for q in payload.questions],
		)
	except KeyError:
		raise HTTPException(status_code=404, detail="Session not found")
	return [QuestionOut.model_validate(q, from_attributes=True) for q in created]


@router.post("/{question_id}/pin", response_model=QuestionEnvelope)
async def toggle_pin_question(question_id: str, sessions: SessionManager = Depends(get_session_manager)):
	try:
		question = await sessions.toggle_pin(question_id)
	except KeyError:
		raise HTTPException(status_code=404, detail="Question not found")
	return QuestionEnvelope(question=QuestionOut.model_validate(question, from_attributes=True))


@router.post("/{question_id}/note", response_model=QuestionEnvelope)
async def update_question_note(question_id: str, payload: NoteIn, sessions: SessionManager = Depends(get_session_manager)):
	try:
		question = await sessions.update_note(question_id, payload.note)
	except KeyError:
		raise HTTPException(status_code=404, detail="Question not found")
	return QuestionEnvelope(question=QuestionOut.model_validate(question, from_attributes=True))
