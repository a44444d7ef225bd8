from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from interview_prep.schemas import ConceptExplanation, GenerateExplanationIn, GenerateQuestionsIn, QuestionAnswer
from interview_prep.services.llm_service import LLMProviderError, LLMService, LLMUnavailableError, ResponseShapeError
from interview_prep.services.prompts import language_from_header
from interview_prep.routers.deps import get_llm_service
from interview_prep.utils.audit import auditor
from interview_prep.utils.json_extract import JsonExtractionFailed


logger = logging.getLogger(__name__)

router = APIRouter()

_GENERATION_ERRORS = (JsonExtractionFailed, LLMProviderError, LLMUnavailableError, ResponseShapeError)


async def _record_failure(kind: str, exc: Exception) -> None:
	record = {"type": f"{kind}_failed", "error": str(exc), "error_type": type(exc).__name__}
	if isinstance(exc, JsonExtractionFailed):
		# Preview goes to the audit log only, never to the client
		record["preview"] = exc.preview
		record["stages"] = list(exc.stages)
	await auditor.log(record)


@router.post("/generate-questions", response_model=List[QuestionAnswer])
async def generate_interview_questions(
	payload: GenerateQuestionsIn,
	accept_language: Optional[str] = Header(default=None),
	llm: LLMService = Depends(get_llm_service),
):
	if not (payload.role and payload.experience and payload.topics_to_focus and payload.number_of_questions):
		raise HTTPException(status_code=400, detail="Missing required fields.")

	language = language_from_header(accept_language)
	try:
		questions = await llm.generate_questions(
			payload.role,
			payload.experience,
			payload.topics_to_focus,
			payload.number_of_questions,
			language,
		)
	except _GENERATION_ERRORS as exc:
		logger.error("Question generation failed: %s", exc)
		await _record_failure("generate_questions", exc)
		raise HTTPException(status_code=500, detail={"message": "Failed to generate questions", "error": str(exc)})

	await auditor.log({
		"type": "generate_questions",
		"role": payload.role,
		"language": language,
		"requested": payload.number_of_questions,
		"returned": len(questions),
	})
	return questions


@router.post("/generate-explanation", response_model=ConceptExplanation)
async def generate_concept_explanation(
	payload: GenerateExplanationIn,
	accept_language: Optional[str] = Header(default=None),
	llm: LLMService = Depends(get_llm_service),
):
	if not payload.question or not payload.question.strip():
		raise HTTPException(status_code=400, detail="Missing required fields.")

	language = language_from_header(accept_language)
	try:
		explanation = await llm.generate_explanation(payload.question, language)
	except _GENERATION_ERRORS as exc:
		logger.error("Explanation generation failed: %s", exc)
		await _record_failure("generate_explanation", exc)
		raise HTTPException(status_code=500, detail={"message": "Failed to generate explanation", "error": str(exc)})

	await auditor.log({
		"type": "generate_explanation",
		"question": payload.question,
		"language": language,
	})
	return explanation
