from __future__ import annotations

from typing import Optional


def language_from_header(accept_language: Optional[str]) -> str:
	"""Map an Accept-Language header to one of the supported content languages."""
	first = (accept_language or "").split(",")[0].strip().lower()
	return "fr" if first.startswith("fr") else "en"


def language_instruction(language: str) -> str:
	if (language or "").lower().startswith("fr"):
		return "IMPORTANT: You MUST write ALL content (questions, answers, explanations) in French."
	return "Write all content in English."


def question_answer_prompt(
	role: str,
	experience: str,
	topics_to_focus: str,
	number_of_questions: int,
	language: str = "en",
) -> str:
	return (
		"You are an AI trained to generate technical interview questions and answers.\n"
		f"{language_instruction(language)}\n\n"
		"Task:\n"
		f"- Role: {role}\n"
		f"- Candidate Experience: {experience} years\n"
		f"- Focus Topics: {topics_to_focus}\n"
		f"- Write {number_of_questions} interview questions\n"
		"- For each question, generate a detailed but beginner-friendly answer.\n"
		"- IMPORTANT: If the answer includes code, you MUST put code blocks on their own lines "
		"with a blank line before and after. Example:\n\n"
		"Some explanation text.\n\n"
		"```javascript\n"
		"const example = true;\n"
		"```\n\n"
		"More text after.\n"
		"- Keep formatting very clean.\n"
		"- Return a pure JSON array like:\n"
		"[\n"
		"  {\n"
		'    "question": "Question here?",\n'
		'    "answer": "Answer here."\n'
		"  },\n"
		"  ...\n"
		"]\n"
		"Important: Do NOT add any extra text. Only return valid JSON.\n"
	)


def concept_explain_prompt(question: str, language: str = "en") -> str:
	return (
		"You are an AI trained to generate explanations for a given interview question.\n"
		f"{language_instruction(language)}\n\n"
		"Task:\n"
		"- Explain the following interview question and its concept in depth as if you're teaching a beginner developer.\n"
		f'- Question: "{question}"\n'
		"- After the explanation, provide a short and clear title that summarizes the concept for the article or page header.\n"
		"- If the explanation includes a code example, use Markdown code blocks with the appropriate "
		"language tag (e.g., ```javascript ... ```).\n"
		"- Keep the formatting very clean and clear.\n"
		"- Return the result as a valid JSON object in the following format:\n\n"
		"{\n"
		'  "title": "Short title here?",\n'
		'  "explanation": "Explanation here."\n'
		"}\n"
		"Important: Do NOT add any extra text outside the JSON format. Only return valid JSON.\n"
	)
