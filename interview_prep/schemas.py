from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Annotated, List, Optional
from datetime import datetime


class ApiModel(BaseModel):
	# Wire format is camelCase to match the frontend; Python side stays snake_case
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _experience_as_text(v):
	# "experience" arrives as either "2" or 2 from the form
	if isinstance(v, (int, float)) and not isinstance(v, bool):
		return str(v)
	return v


ExperienceText = Annotated[str, BeforeValidator(_experience_as_text)]


class GenerateQuestionsIn(ApiModel):
	role: Optional[str] = None
	experience: Optional[ExperienceText] = None
	topics_to_focus: Optional[str] = None
	number_of_questions: Optional[int] = Field(default=None, ge=0, le=50)


class GenerateExplanationIn(ApiModel):
	question: Optional[str] = None


class QuestionAnswer(ApiModel):
	question: str
	answer: str


class ConceptExplanation(ApiModel):
	title: str
	explanation: str


class QuestionOut(ApiModel):
	question_id: str
	session_id: str
	question: str
	answer: str
	note: str = ""
	is_pinned: bool = False
	created_at: datetime
	updated_at: datetime


class SessionCreateIn(ApiModel):
	role: str = Field(..., min_length=1)
	experience: ExperienceText = Field(..., min_length=1)
	topics_to_focus: str = Field(..., min_length=1)
	description: Optional[str] = None
	questions: List[QuestionAnswer] = Field(default_factory=list)


class SessionOut(ApiModel):
	session_id: str
	role: str
	experience: str
	topics_to_focus: str
	description: Optional[str] = None
	language: str = "en"
	questions: List[QuestionOut]
	created_at: datetime
	updated_at: datetime


class SessionEnvelope(ApiModel):
	success: bool = True
	session: SessionOut


class AddQuestionsIn(ApiModel):
	session_id: Optional[str] = None
	questions: Optional[List[QuestionAnswer]] = None


class QuestionEnvelope(ApiModel):
	success: bool = True
	question: QuestionOut


class NoteIn(ApiModel):
	note: Optional[str] = None
