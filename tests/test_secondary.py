"""
Unit tests for the secondary classifier contract.
"""

import json

import pytest

from scoring.models import OpinionLabel, SecondaryOpinion
from scoring.secondary import (
    BatchVerdictLabel,
    ClassifierResponse,
    SecondaryClassifierError,
    extract_json_payload,
    find_json_object,
    merge_opinions,
    parse_classifier_response,
    parse_classifier_text,
    select_candidates,
)


PAYLOAD = {
    "summary": {"verdict": "bot-heavy", "confidence": 87},
    "per_comment": [
        {"idx": 1, "ai_score": 92, "label": "bot", "reason": "Template text"},
        {"idx": 0, "ai_score": 15, "label": "human", "reason": "Specific question"},
    ],
}


class TestSelectCandidates:
    """Test cases for candidate selection."""

    def test_highest_scores_first_ties_by_position(self, make_scored):
        scored = [make_scored(s) for s in [20, 90, 55, 90, 10]]
        candidates = select_candidates(scored, limit=3)
        assert [c.index for c in candidates] == [1, 3, 2]

    def test_cap(self, make_scored):
        scored = [make_scored(50) for _ in range(40)]
        assert len(select_candidates(scored)) == 30

    def test_text_truncated(self, make_scored):
        scored = [make_scored(80, text="x" * 900)]
        candidate = select_candidates(scored)[0]
        assert len(candidate.text) == 500

    def test_payload_shape(self, make_scored):
        scored = [make_scored(75, flags=["contains link"], text="visit my site", likes=3)]
        payload = select_candidates(scored)[0].to_payload()
        assert payload == {
            "idx": 0,
            "author": "viewer",
            "text": "visit my site",
            "likes": 3,
            "publishedAt": "2024-05-01T12:00:00Z",
            "ruleScore": 75,
            "flags": ["contains link"],
        }


class TestExtractJson:
    """Test cases for JSON payload extraction."""

    def test_plain_json(self):
        assert extract_json_payload(json.dumps(PAYLOAD)) == PAYLOAD

    def test_code_fence(self):
        text = "```json\n" + json.dumps(PAYLOAD, indent=2) + "\n```"
        assert extract_json_payload(text) == PAYLOAD

    def test_embedded_in_prose(self):
        text = "Sure! Here is the analysis:\n" + json.dumps(PAYLOAD) + "\nLet me know if you need more."
        assert extract_json_payload(text) == PAYLOAD

    def test_braces_inside_strings(self):
        text = 'Result: {"per_comment": [{"idx": 0, "reason": "uses {curly} braces"}]} trailing }'
        assert find_json_object(text) == '{"per_comment": [{"idx": 0, "reason": "uses {curly} braces"}]}'

    def test_bare_list(self):
        payload = extract_json_payload('[{"idx": 0, "label": "bot"}]')
        assert payload == {"per_comment": [{"idx": 0, "label": "bot"}]}

    @pytest.mark.parametrize("text", [
        "",
        "   ",
        "I could not analyze these comments.",
        "{not json at all}",
        "{\"unterminated\": ",
        "42",
    ])
    def test_unparseable_raises(self, text):
        with pytest.raises(SecondaryClassifierError):
            extract_json_payload(text)

    @pytest.mark.parametrize("text", [
        '{"per_comment": [{"idx": 0, "ai_score": ' + "9" * 5000 + '}]}',
        '{"per_comment": ' + "[" * 100000 + "]" * 100000 + '}',
    ], ids=["huge-integer", "deep-nesting"])
    def test_oversized_json_raises(self, text):
        with pytest.raises(SecondaryClassifierError):
            parse_classifier_text(text)


class TestParseResponse:
    """Test cases for field-by-field sanitizing."""

    def test_valid_payload(self):
        response = parse_classifier_response(PAYLOAD)
        assert response.opinions[1] == SecondaryOpinion(92, OpinionLabel.BOT, "Template text")
        assert response.opinions[0].label == OpinionLabel.HUMAN
        assert response.verdict.label == BatchVerdictLabel.BOT_HEAVY
        assert response.verdict.confidence == 87

    def test_scores_clamped(self):
        response = parse_classifier_response({"per_comment": [
            {"idx": 0, "ai_score": 150, "label": "bot"},
            {"idx": 1, "ai_score": -20, "label": "human"},
            {"idx": 2, "ai_score": "73.6", "label": "bot"},
        ]})
        assert [response.opinions[i].score for i in range(3)] == [100, 0, 74]

    def test_bad_score_becomes_none(self):
        response = parse_classifier_response({"per_comment": [
            {"idx": 0, "ai_score": "high", "label": "bot"},
            {"idx": 1, "ai_score": True, "label": "bot"},
            {"idx": 2, "label": "bot"},
        ]})
        assert all(response.opinions[i].score is None for i in range(3))

    def test_invalid_label_is_uncertain(self):
        response = parse_classifier_response({"per_comment": [
            {"idx": 0, "ai_score": 50, "label": "probably-bot"},
            {"idx": 1, "ai_score": 50, "label": None},
            {"idx": 2, "ai_score": 50, "label": "BOT"},
        ]})
        assert response.opinions[0].label == OpinionLabel.UNCERTAIN
        assert response.opinions[1].label == OpinionLabel.UNCERTAIN
        assert response.opinions[2].label == OpinionLabel.BOT

    def test_malformed_entries_skipped(self):
        response = parse_classifier_response({"per_comment": [
            "not an object",
            {"ai_score": 80, "label": "bot"},
            {"idx": True, "label": "bot"},
            {"idx": "--5", "label": "bot"},
            {"idx": "²", "label": "bot"},
            {"idx": "3", "label": "bot"},
            {"idx": 3, "label": "human"},
        ]})
        assert list(response.opinions) == [3]
        assert response.opinions[3].label == OpinionLabel.BOT

    def test_reason_truncated_and_typed(self):
        response = parse_classifier_response({"per_comment": [
            {"idx": 0, "label": "bot", "reason": "r" * 1000},
            {"idx": 1, "label": "bot", "reason": {"nested": True}},
        ]})
        assert len(response.opinions[0].reason) == 300
        assert response.opinions[1].reason == ""

    def test_bad_summary_dropped(self):
        for summary in [None, "bot-heavy", {"verdict": "spammy"}, {"confidence": 50}]:
            assert parse_classifier_response({"summary": summary}).verdict is None

    def test_per_comment_not_a_list(self):
        response = parse_classifier_response({"per_comment": {"idx": 0}})
        assert response.opinions == {}

    def test_parse_text(self):
        response = parse_classifier_text("```\n" + json.dumps(PAYLOAD) + "\n```")
        assert set(response.opinions) == {0, 1}


class TestMergeOpinions:
    """Test cases for merging opinions back by index."""

    def test_merge_by_index(self, make_scored):
        scored = [make_scored(s) for s in [10, 90, 80]]
        candidates = select_candidates(scored, limit=2)
        response = ClassifierResponse(opinions={
            1: SecondaryOpinion(95, OpinionLabel.BOT, "spam"),
        })
        merged = merge_opinions(scored, candidates, response)

        assert merged[0].opinion is None
        assert merged[1].opinion.score == 95
        assert merged[2].opinion == SecondaryOpinion.placeholder()

    def test_out_of_range_index_ignored(self, make_scored):
        scored = [make_scored(s) for s in [70, 80]]
        candidates = select_candidates(scored)
        response = ClassifierResponse(opinions={
            0: SecondaryOpinion(60, OpinionLabel.HUMAN, ""),
            7: SecondaryOpinion(99, OpinionLabel.BOT, "ghost"),
            -1: SecondaryOpinion(99, OpinionLabel.BOT, "ghost"),
        })
        merged = merge_opinions(scored, candidates, response)
        assert len(merged) == 2
        assert merged[0].opinion.label == OpinionLabel.HUMAN
        assert merged[1].opinion.label == OpinionLabel.UNCERTAIN
        assert merged[1].opinion.score is None

    def test_non_candidate_index_ignored(self, make_scored):
        scored = [make_scored(s) for s in [10, 90]]
        candidates = select_candidates(scored, limit=1)
        response = ClassifierResponse(opinions={0: SecondaryOpinion(99, OpinionLabel.BOT, "")})
        merged = merge_opinions(scored, candidates, response)
        assert merged[0].opinion is None

    def test_heuristic_score_untouched(self, make_scored):
        scored = [make_scored(42)]
        response = ClassifierResponse(opinions={0: SecondaryOpinion(99, OpinionLabel.BOT, "")})
        merged = merge_opinions(scored, select_candidates(scored), response)
        assert merged[0].bot_score == 42
        assert scored[0].opinion is None
