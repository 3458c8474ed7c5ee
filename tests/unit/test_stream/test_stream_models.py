"""Tests for reasoning and source payload decoding."""

import dataclasses
import json

import pytest

from hawkeye_cli.core.stream import (
    DeltaKind,
    FragmentCategory,
    InputFragment,
    ReasoningPayload,
    SourcePayload,
    parse_source_label,
)


class TestReasoningPayload:
    def test_decodes_known_fields(self):
        payload = ReasoningPayload.parse(
            json.dumps({"id": "s1", "description": "Check pods", "investigation": "text", "extra": 1})
        )
        assert payload.step_id == "s1"
        assert payload.description == "Check pods"
        assert payload.investigation == "text"

    def test_step_id_falls_back_to_description(self):
        assert ReasoningPayload.parse(json.dumps({"description": "Check"})).step_id == "Check"

    def test_step_id_placeholder(self):
        assert ReasoningPayload.parse("{}").step_id == "_default"

    def test_non_string_values_coerced(self):
        payload = ReasoningPayload.parse(json.dumps({"id": 7, "investigation": None}))
        assert payload.id == "7"
        assert payload.investigation == ""

    def test_undecodable_becomes_investigation(self):
        payload = ReasoningPayload.parse("not json")
        assert payload.investigation == "not json"
        assert payload.step_id == "_default"

    def test_json_array_becomes_investigation(self):
        assert ReasoningPayload.parse("[1, 2]").investigation == "[1, 2]"

    def test_completion_uses_cot_status_first(self):
        payload = ReasoningPayload(status="IN_PROGRESS", cot_status="COT_STATUS_COMPLETED")
        assert payload.effective_status == "COT_STATUS_COMPLETED"
        assert payload.is_completed

    def test_completion_case_insensitive(self):
        assert ReasoningPayload(status="completed").is_completed
        assert not ReasoningPayload(status="IN_PROGRESS").is_completed


class TestSourcePayload:
    def test_title_preferred_over_id(self):
        source = SourcePayload(id="logs.app", title="Application logs")
        assert source.label == "Application logs"

    def test_namespace_stripped(self):
        assert SourcePayload(id="aws.cloudwatch.app_logs").label == "app_logs"

    def test_container_insights_prefix_stripped(self):
        assert SourcePayload(id="containerinsights_memory").label == "memory"

    def test_category_prefix(self):
        assert SourcePayload(id="x.cpu", category="metrics").label == "[metrics] cpu"

    def test_parse_source_label_passes_through_raw(self):
        assert parse_source_label("plain source") == "plain source"

    def test_parse_source_label_decodes(self):
        assert parse_source_label(json.dumps({"title": "a.b"})) == "b"


class TestInputFragment:
    def test_defaults(self):
        fragment = InputFragment(FragmentCategory.ANSWER)
        assert fragment.payload == ""
        assert fragment.delta_kind is DeltaKind.NONE

    def test_frozen(self):
        fragment = InputFragment(FragmentCategory.ANSWER, "x", DeltaKind.DELTA)
        with pytest.raises(dataclasses.FrozenInstanceError):
            fragment.payload = "y"
