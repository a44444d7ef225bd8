"""Lenient JSON extraction for LLM chat completions.

Models are asked for pure JSON but routinely wrap it in prose or markdown
fences, leave trailing commas, embed raw newlines in string values, or forget
to escape inner quotes. ``extract_structured_value`` runs a fixed pipeline:

1. Trim to the outermost ``[``/``{`` ... ``]``/``}`` span
2. Parse as-is
3. Drop trailing commas before ``]`` or ``}``, escape raw control characters
   inside strings, parse again
4. Escape inner quotes that are not followed by a structural character,
   parse a final time

Only the last failure is surfaced, as ``JsonExtractionFailed``.
"""

from __future__ import annotations

import json
import logging
import re
from enum import Enum
from typing import Any, Optional, Tuple


PREVIEW_CHARS = 500

_logger = logging.getLogger(__name__)

_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_CODE_FENCE = re.compile(r"```.*?```", re.DOTALL)
_BLANK_LINE_RUN = re.compile(r"\n{3,}")

_CONTROL_ESCAPES = {
	"\n": "\\n",
	"\r": "\\r",
	"\t": "\\t",
}
_WHITESPACE = frozenset(" \n\r\t")
# "" stands for end of input
_STRING_TERMINATORS = frozenset({",", "}", "]", ":", ""})


class ScanState(Enum):
	OUTSIDE = "outside"
	IN_STRING = "in_string"
	ESCAPED = "escaped"


class JsonExtractionFailed(ValueError):
	"""Raised when no repair pass yields parseable JSON.

	Attributes:
		message: decoder error from the final parse attempt
		preview: leading slice of the text as it stood after every repair pass
		stages: names of the pipeline stages that ran
	"""

	def __init__(self, message: str, preview: str, stages: Tuple[str, ...] = ()) -> None:
		super().__init__(f"Failed to parse AI response as JSON: {message}")
		self.message = message
		self.preview = preview
		self.stages = stages


def extract_json_boundaries(text: str) -> str:
	"""Cut ``text`` down to the span between the first opener and the last closer."""
	starts = [i for i in (text.find("["), text.find("{")) if i != -1]
	end = max(text.rfind("]"), text.rfind("}"))
	if not starts or end == -1:
		return text
	start = min(starts)
	if end <= start:
		return text
	return text[start:end + 1]


def strip_trailing_commas(text: str) -> str:
	return _TRAILING_COMMA.sub(r"\1", text)


def escape_control_characters(text: str) -> str:
	"""Escape raw newlines, carriage returns and tabs inside string literals.

	Any other character below U+0020 inside a string is dropped. Text outside
	string literals is left as-is.
	"""
	out: list[str] = []
	state = ScanState.OUTSIDE
	resume = ScanState.OUTSIDE

	for char in text:
		if state is ScanState.ESCAPED:
			out.append(char)
			state = resume
			continue
		if char == "\\":
			out.append(char)
			resume, state = state, ScanState.ESCAPED
			continue
		if char == '"':
			out.append(char)
			state = ScanState.OUTSIDE if state is ScanState.IN_STRING else ScanState.IN_STRING
			continue
		if state is ScanState.IN_STRING and ord(char) < 0x20:
			replacement = _CONTROL_ESCAPES.get(char)
			if replacement is not None:
				out.append(replacement)
			continue
		out.append(char)

	return "".join(out)


def _next_significant_char(text: str, start: int) -> str:
	for i in range(start, len(text)):
		if text[i] not in _WHITESPACE:
			return text[i]
	return ""


def escape_unescaped_quotes(text: str) -> str:
	"""Escape quotes that sit inside a string value instead of closing it.

	A quote seen while inside a string closes it only when the next
	non-whitespace character is ``,`` ``}`` ``]`` ``:`` or the end of input.
	Otherwise it is rewritten as ``\\"`` and the string stays open.
	"""
	out: list[str] = []
	state = ScanState.OUTSIDE
	resume = ScanState.OUTSIDE

	for index, char in enumerate(text):
		if state is ScanState.ESCAPED:
			out.append(char)
			state = resume
			continue
		if char == "\\":
			out.append(char)
			resume, state = state, ScanState.ESCAPED
			continue
		if char != '"':
			out.append(char)
			continue

		if state is ScanState.OUTSIDE:
			state = ScanState.IN_STRING
			out.append(char)
		elif _next_significant_char(text, index + 1) in _STRING_TERMINATORS:
			state = ScanState.OUTSIDE
			out.append(char)
		else:
			out.append('\\"')

	return "".join(out)


def normalize_code_fences(text: str) -> str:
	"""Put one blank line around each fenced code block.

	Runs of three or more newlines outside fences collapse to a single blank
	line, and the result is stripped. Fence bodies are kept verbatim.
	"""
	pieces: list[str] = []
	last = 0
	for match in _CODE_FENCE.finditer(text):
		prose = _BLANK_LINE_RUN.sub("\n\n", text[last:match.start()]).strip()
		if prose:
			pieces.append(prose)
		pieces.append(match.group(0))
		last = match.end()
	tail = _BLANK_LINE_RUN.sub("\n\n", text[last:]).strip()
	if tail:
		pieces.append(tail)
	return "\n\n".join(pieces)


def normalize_strings(value: Any) -> Any:
	"""Apply ``normalize_code_fences`` to every string value in a parsed document."""
	if isinstance(value, str):
		return normalize_code_fences(value)
	if isinstance(value, dict):
		return {key: normalize_strings(item) for key, item in value.items()}
	if isinstance(value, list):
		return [normalize_strings(item) for item in value]
	return value


def _reject_constant(name: str) -> Any:
	# json.loads accepts NaN and Infinity; standard JSON does not
	raise ValueError(f"Unexpected token {name}")


def _parse(text: str) -> Any:
	return normalize_strings(json.loads(text, parse_constant=_reject_constant))


def extract_structured_value(
	raw_text: str,
	logger: Optional[logging.Logger] = None,
	*,
	preview_chars: int = PREVIEW_CHARS,
) -> Any:
	"""Parse the JSON value embedded in ``raw_text``.

	Returns the decoded value with string fields normalized for markdown
	rendering. Raises ``JsonExtractionFailed`` when every repair pass fails.
	"""
	log = logger or _logger
	stages: list[str] = ["boundaries"]

	cleaned = extract_json_boundaries(raw_text)
	try:
		return _parse(cleaned)
	except (ValueError, RecursionError):
		log.debug("Initial JSON parse failed, attempting sanitization...")

	stages.extend(["trailing_commas", "control_characters"])
	cleaned = strip_trailing_commas(cleaned)
	cleaned = escape_control_characters(cleaned)
	try:
		return _parse(cleaned)
	except (ValueError, RecursionError):
		log.debug("Second JSON parse failed, attempting quote fix...")

	stages.append("unescaped_quotes")
	cleaned = escape_unescaped_quotes(cleaned)
	try:
		return _parse(cleaned)
	except (ValueError, RecursionError) as exc:
		preview = cleaned[:preview_chars]
		log.error(
			"JSON parsing failed after all sanitization attempts. Content preview: %s...",
			preview,
		)
		raise JsonExtractionFailed(str(exc), preview, tuple(stages)) from exc
