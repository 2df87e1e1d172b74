import json

from stepplan.llm.json_repair import (
    close_truncated,
    extract_object_span,
    needs_truncation_repair,
    parse_plan_text,
    strip_code_fences,
    strip_trailing_commas,
    wrap_bare_steps,
)
from stepplan.llm.schemas import FallbackReason


def test_text_without_brace_has_no_payload():
    res = parse_plan_text("This is one action, nothing to plan.")
    assert not res.ok
    assert res.reason == FallbackReason.NO_STRUCTURED_PAYLOAD


def test_empty_text_has_no_payload():
    assert parse_plan_text("").reason == FallbackReason.NO_STRUCTURED_PAYLOAD


def test_valid_json_parses_without_repair(valid_plan_text):
    res = parse_plan_text(valid_plan_text)
    assert res.ok
    assert res.repaired is False
    assert res.candidate == json.loads(valid_plan_text)


def test_fenced_payload_inside_prose_parses_like_plain(valid_plan_text):
    raw = f"Sure! Here is the plan:\n```json\n{valid_plan_text}\n```\nAnything else?"
    assert parse_plan_text(raw).candidate == parse_plan_text(valid_plan_text).candidate


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fences('```\n{"a": 1}```') == '{"a": 1}'


def test_span_stops_at_matching_brace():
    text = 'plan: {"a": {"b": "}"}} trailing {junk}'
    assert extract_object_span(text) == '{"a": {"b": "}"}}'


def test_unclosed_span_runs_to_end_of_text():
    assert extract_object_span('x {"a": [1, 2  ') == '{"a": [1, 2'


def test_trailing_commas_removed_on_retry():
    raw = '{"isMultiStep": true, "steps": [{"action": "a",}, {"action": "b"},],}'
    res = parse_plan_text(raw)
    assert res.ok and res.repaired
    assert [s["action"] for s in res.candidate["steps"]] == ["a", "b"]


def test_trailing_comma_strip_is_idempotent(valid_plan_text):
    once = strip_trailing_commas('{"a": [1, 2,], "b": {"c": 3,},}')
    assert once == '{"a": [1, 2], "b": {"c": 3}}'
    assert strip_trailing_commas(once) == once
    assert strip_trailing_commas(valid_plan_text) == valid_plan_text


def test_commas_inside_strings_are_kept():
    text = '{"action": "say a, b,]"}'
    assert strip_trailing_commas(text) == text


def test_truncated_output_is_closed_and_ellipsis_dropped():
    raw = (
        '{"isMultiStep": true, "steps": [{"stepNumber": 1, "tool": "send_location", '
        '"action": "send location", "parameters": {}}, {"stepNumber": 2, ..."tool": "sen'
    )
    span = extract_object_span(raw)
    assert needs_truncation_repair(span)

    repaired = close_truncated(span)
    assert repaired.endswith('{"stepNumber": 2, "tool": "sen"}]}')
    assert [s["tool"] for s in json.loads(repaired)["steps"]] == ["send_location", "sen"]

    res = parse_plan_text(raw)
    assert res.ok and res.repaired


def test_truncation_inside_a_key_drops_the_key():
    repaired = close_truncated('{"isMultiStep": true, "steps": [{"stepNumber": 1, "too')
    assert json.loads(repaired) == {"isMultiStep": True, "steps": [{"stepNumber": 1}]}


def test_truncation_after_key_without_colon_drops_the_key():
    assert json.loads(close_truncated('{"isMultiStep": false, "reasoning"')) == {"isMultiStep": False}


def test_truncation_after_colon_gets_null():
    repaired = close_truncated('{"isMultiStep": true, "reasoning":')
    assert json.loads(repaired) == {"isMultiStep": True, "reasoning": None}


def test_truncated_literal_is_completed():
    assert json.loads(close_truncated('{"isMultiStep": tr')) == {"isMultiStep": True}


def test_balanced_span_with_elided_item():
    raw = '{"isMultiStep": true, "steps": [{"action": "a"}, {"action": "b"}, ...]}'
    res = parse_plan_text(raw)
    assert res.ok and res.repaired
    assert len(res.candidate["steps"]) == 2


def test_ellipsis_inside_strings_is_kept():
    res = parse_plan_text('{"isMultiStep": false, "reasoning": "wait..."}')
    assert res.ok and not res.repaired
    assert res.candidate["reasoning"] == "wait..."


def test_bare_steps_are_wrapped_in_objects():
    raw = (
        '{"isMultiStep": true, "steps": [\n'
        '  "stepNumber": 1, "tool": "send_location", "action": "send location", "parameters": {},\n'
        '  "stepNumber": 2, "tool": "create_image", "action": "draw", "parameters": {"prompt": "x"}\n'
        '  }\n'
        '], "reasoning": "then"}'
    )
    res = parse_plan_text(raw)
    assert res.ok and res.repaired
    assert [s["stepNumber"] for s in res.candidate["steps"]] == [1, 2]
    assert res.candidate["steps"][1]["parameters"] == {"prompt": "x"}
    assert res.candidate["reasoning"] == "then"


def test_wrap_bare_steps_leaves_wrapped_steps_alone(valid_plan_text):
    assert wrap_bare_steps(valid_plan_text) == valid_plan_text


def test_unrepairable_syntax_falls_back():
    res = parse_plan_text('{"isMultiStep": true, "steps": [oops not json]}')
    assert not res.ok
    assert res.reason == FallbackReason.UNREPAIRABLE_SYNTAX


def test_fence_markers_inside_strings_are_kept():
    raw = '```json\n{"isMultiStep": false, "reasoning": "run ```python x```"}\n```'
    assert strip_code_fences(raw) == '{"isMultiStep": false, "reasoning": "run ```python x```"}'
    assert parse_plan_text(raw).candidate["reasoning"] == "run ```python x```"


def test_truncated_number_is_trimmed():
    assert json.loads(close_truncated('{"stepNumber": 2.')) == {"stepNumber": 2}
    assert json.loads(close_truncated('{"stepNumber": 1e-')) == {"stepNumber": 1}
    assert json.loads(close_truncated('{"stepNumber": -')) == {"stepNumber": None}
    assert json.loads(close_truncated('{"counts": [1, -')) == {"counts": [1]}

    res = parse_plan_text('{"isMultiStep": true, "steps": [{"stepNumber": 2.')
    assert res.ok and res.repaired
    assert res.candidate["steps"] == [{"stepNumber": 2}]
