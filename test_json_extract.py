import json
import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from interview_prep.utils.json_extract import (
	JsonExtractionFailed,
	escape_control_characters,
	escape_unescaped_quotes,
	extract_json_boundaries,
	extract_structured_value,
	normalize_code_fences,
	normalize_strings,
	strip_trailing_commas,
)


class TestValidJson:
	def test_clean_array(self):
		raw = '[{"question": "What is React?", "answer": "A library."}]'
		assert extract_structured_value(raw) == [{"question": "What is React?", "answer": "A library."}]

	def test_clean_object(self):
		raw = '{"title": "React Basics", "explanation": "React is..."}'
		assert extract_structured_value(raw) == {"title": "React Basics", "explanation": "React is..."}

	def test_matches_json_loads_for_scalars_and_nesting(self):
		raw = '{"a": [1, 2.5, true, false, null], "b": {"c": "d"}, "a2": -3}'
		assert extract_structured_value(raw) == json.loads(raw)

	def test_duplicate_keys_last_wins(self):
		assert extract_structured_value('{"k": 1, "k": 2}') == {"k": 2}

	def test_key_order_preserved(self):
		result = extract_structured_value('{"z": 1, "a": 2, "m": 3}')
		assert list(result) == ["z", "a", "m"]

	def test_input_not_mutated(self):
		raw = 'Here:\n{"a": "b",}\nThanks'
		copy = str(raw)
		extract_structured_value(raw)
		assert raw == copy


class TestBoundaries:
	def test_prose_around_json(self):
		raw = 'Here is the JSON:\n[{"question":"Q?","answer":"A."}]\nDone!'
		assert extract_structured_value(raw) == [{"question": "Q?", "answer": "A."}]

	def test_json_fence(self):
		raw = '```json\n[{"question": "Test?", "answer": "Yes."}]\n```'
		assert extract_structured_value(raw) == [{"question": "Test?", "answer": "Yes."}]

	def test_javascript_fence(self):
		raw = '```javascript\n{"title": "JS", "explanation": "..."}\n```'
		assert extract_structured_value(raw) == {"title": "JS", "explanation": "..."}

	def test_no_brackets_is_noop(self):
		assert extract_json_boundaries("no json here") == "no json here"

	def test_earliest_opener_latest_closer(self):
		text = 'x {"a": [1]} y [2] z'
		assert extract_json_boundaries(text) == '{"a": [1]} y [2]'

	def test_only_array_opener(self):
		assert extract_json_boundaries("pre [1, 2] post") == "[1, 2]"

	def test_closer_before_opener_is_noop(self):
		assert extract_json_boundaries("} then {") == "} then {"


class TestTrailingCommas:
	def test_array(self):
		raw = '[{"question":"Q?","answer":"A."},]'
		assert extract_structured_value(raw) == [{"question": "Q?", "answer": "A."}]

	def test_object(self):
		raw = '{"title":"T","explanation":"E",}'
		assert extract_structured_value(raw) == {"title": "T", "explanation": "E"}

	def test_whitespace_before_closer(self):
		assert strip_trailing_commas('[1, 2 ,\n  ]') == "[1, 2 \n  ]"

	def test_inner_commas_kept(self):
		assert strip_trailing_commas('{"a": 1, "b": 2}') == '{"a": 1, "b": 2}'


class TestControlCharacters:
	def test_newline_in_string(self):
		result = extract_structured_value('{"answer": "Line 1\nLine 2"}')
		assert result == {"answer": "Line 1\nLine 2"}
		assert "\\n" not in result["answer"]

	def test_tab_in_string(self):
		assert extract_structured_value('{"answer": "Tab\there"}') == {"answer": "Tab\there"}

	def test_carriage_return(self):
		assert extract_structured_value('{"answer": "Line\r\nBreak"}') == {"answer": "Line\r\nBreak"}

	def test_other_control_chars_dropped(self):
		assert escape_control_characters('"a\x01b"') == '"ab"'

	def test_outside_strings_untouched(self):
		text = '{\n\t"a": 1\n}'
		assert escape_control_characters(text) == text

	def test_escaped_quote_does_not_end_string(self):
		assert escape_control_characters('"say \\"hi\nthere\\""') == '"say \\"hi\\nthere\\""'

	def test_non_ascii_text(self):
		result = extract_structured_value('{"answer": "café\n日本語 ✓"}')
		assert result == {"answer": "café\n日本語 ✓"}


class TestUnescapedQuotes:
	def test_inner_quotes(self):
		raw = '{"answer": "Use "strict mode" in JavaScript"}'
		assert extract_structured_value(raw) == {"answer": 'Use "strict mode" in JavaScript'}

	def test_already_escaped_quotes(self):
		raw = '{"answer": "Say \\"Hello\\""}'
		assert extract_structured_value(raw) == {"answer": 'Say "Hello"'}

	def test_pass_does_not_double_escape(self):
		text = '{"answer": "Say \\"Hello\\""}'
		assert escape_unescaped_quotes(text) == text

	def test_quote_before_colon_ends_key(self):
		assert escape_unescaped_quotes('{"a" : "b"}') == '{"a" : "b"}'

	def test_quote_at_end_of_input_ends_string(self):
		assert escape_unescaped_quotes('"abc"') == '"abc"'

	def test_combined_with_newlines_and_trailing_comma(self):
		raw = 'Sure!\n[{"question": "What is "this"?", "answer": "It depends\non context"},]\nBye'
		assert extract_structured_value(raw) == [
			{"question": 'What is "this"?', "answer": "It depends\non context"},
		]


class TestFailures:
	def test_plain_prose(self):
		with pytest.raises(JsonExtractionFailed):
			extract_structured_value("This is not JSON at all")

	def test_broken_structure(self):
		with pytest.raises(JsonExtractionFailed) as info:
			extract_structured_value("[{broken json structure")
		assert info.value.stages == ("boundaries", "trailing_commas", "control_characters", "unescaped_quotes")
		assert str(info.value).startswith("Failed to parse AI response as JSON:")

	def test_empty_input(self):
		with pytest.raises(JsonExtractionFailed):
			extract_structured_value("")

	def test_preview_is_bounded(self):
		raw = "[" + "x" * 2000
		with pytest.raises(JsonExtractionFailed) as info:
			extract_structured_value(raw)
		assert len(info.value.preview) == 500
		assert info.value.preview.startswith("[xxx")

	def test_custom_preview_length(self):
		with pytest.raises(JsonExtractionFailed) as info:
			extract_structured_value("{nope", preview_chars=3)
		assert info.value.preview == "{no"

	def test_deep_nesting_is_typed_failure(self):
		with pytest.raises(JsonExtractionFailed) as info:
			extract_structured_value("[" * 100000 + "]" * 100000)
		assert len(info.value.preview) == 500

	@pytest.mark.parametrize("raw", ['{"a": NaN}', "[Infinity]", '{"a": -Infinity}'])
	def test_non_standard_constants_rejected(self, raw):
		with pytest.raises(JsonExtractionFailed) as info:
			extract_structured_value(raw)
		assert "Unexpected token" in info.value.message

	def test_is_value_error(self):
		with pytest.raises(ValueError):
			extract_structured_value("nothing")

	def test_injected_logger_receives_diagnostics(self, caplog):
		log = logging.getLogger("test.extract")
		with caplog.at_level(logging.DEBUG, logger="test.extract"):
			with pytest.raises(JsonExtractionFailed):
				extract_structured_value("[{broken", log)
		names = {r.name for r in caplog.records}
		assert names == {"test.extract"}
		assert any(r.levelno == logging.ERROR and "Content preview" in r.getMessage() for r in caplog.records)


class TestNormalization:
	def test_inline_fence_gets_blank_lines(self):
		text = "Some explanation. ```javascript\nconst x = 1;\n``` More text."
		assert normalize_code_fences(text) == (
			"Some explanation.\n\n```javascript\nconst x = 1;\n```\n\nMore text."
		)

	def test_collapses_blank_line_runs(self):
		assert normalize_code_fences("a\n\n\n\nb\n\n\nc") == "a\n\nb\n\nc"

	def test_trims(self):
		assert normalize_code_fences("  title \n") == "title"

	def test_fence_body_untouched(self):
		text = "```python\nx = 1\n\n\n\ny = 2\n```"
		assert normalize_code_fences(text) == text

	def test_idempotent(self):
		samples = [
			"Some explanation. ```javascript\nconst x = 1;\n``` More text.",
			"\n\n```\ncode\n```\n\n\n\n```sh\nls\n```tail",
			"plain",
			"unclosed ```js\nconst a = 1;",
		]
		for sample in samples:
			once = normalize_code_fences(sample)
			assert normalize_code_fences(once) == once

	def test_no_triple_newlines_remain(self):
		text = "Intro\n\n\n\n```js\nx\n```\n\n\n\nOutro"
		assert "\n\n\n" not in normalize_code_fences(text)

	def test_recursive_and_non_strings_untouched(self):
		value = {"a": ["  x  ", 1, None, True], "b": {"c": "y\n\n\n\nz"}, "n": 2.5}
		assert normalize_strings(value) == {"a": ["x", 1, None, True], "b": {"c": "y\n\nz"}, "n": 2.5}

	def test_applied_after_parse(self):
		raw = json.dumps([{"question": "Q", "answer": "See ```js\nlet a;\n``` ok"}])
		result = extract_structured_value(raw)
		assert result[0]["answer"] == "See\n\n```js\nlet a;\n```\n\nok"


def test_concurrent_calls_match_sequential():
	inputs = [
		'[{"question":"Q%d?","answer":"A."},]' % i if i % 3 == 0
		else '{"answer": "Line %d\nnext"}' % i if i % 3 == 1
		else 'Here: {"answer": "Use "quotes" %d"}' % i
		for i in range(60)
	]
	sequential = [extract_structured_value(text) for text in inputs]
	with ThreadPoolExecutor(max_workers=8) as pool:
		concurrent = list(pool.map(extract_structured_value, inputs))
	assert concurrent == sequential
