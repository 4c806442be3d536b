"""
Unit tests for the Gemini second-opinion client.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from gemini_client import GeminiAPIError, GeminiClassifier
from scoring.models import OpinionLabel
from scoring.secondary import BatchVerdictLabel, SecondaryClassifierError, select_candidates


def _response(payload=None, ok=True, status_code=200, text=""):
    response = MagicMock(ok=ok, status_code=status_code, text=text)
    response.json.return_value = payload
    return response


def _gemini_body(*parts):
    return {"candidates": [{"content": {"parts": [{"text": p} for p in parts]}}]}


ANSWER = {
    "summary": {"verdict": "mixed", "confidence": 64},
    "per_comment": [{"idx": 0, "ai_score": 88, "label": "bot", "reason": "Copy-paste promo"}],
}


@pytest.fixture
def candidates(make_scored):
    return select_candidates([make_scored(82, flags=["self-promo"], text="sub to my channel")])


class TestGenerate:
    """Test cases for the raw generateContent call."""

    @patch("gemini_client.requests.post")
    def test_request_shape(self, mock_post):
        mock_post.return_value = _response(_gemini_body("hello"))
        client = GeminiClassifier("gm-key", model="gemini-test", timeout=5)

        assert client.generate("prompt") == "hello"

        args, kwargs = mock_post.call_args
        assert args[0] == (
            "https://generativelanguage.googleapis.com/v1beta/models/gemini-test:generateContent"
        )
        assert kwargs["params"] == {"key": "gm-key"}
        assert kwargs["timeout"] == 5
        body = kwargs["json"]
        assert body["contents"][0]["parts"][0]["text"] == "prompt"
        assert body["generationConfig"] == {"temperature": 0.2, "maxOutputTokens": 2048}

    @patch("gemini_client.requests.post")
    def test_parts_joined(self, mock_post):
        mock_post.return_value = _response(_gemini_body('{"per_comment": ', "[]}"))
        assert GeminiClassifier("k").generate("p") == '{"per_comment": []}'

    @patch("gemini_client.requests.post")
    def test_http_error(self, mock_post):
        mock_post.return_value = _response(ok=False, status_code=429, text="Resource exhausted")
        with pytest.raises(GeminiAPIError, match="429"):
            GeminiClassifier("k").generate("p")

    @patch("gemini_client.requests.post")
    def test_transport_error(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError("offline")
        with pytest.raises(GeminiAPIError):
            GeminiClassifier("k").generate("p")

    @patch("gemini_client.requests.post")
    def test_non_json_body(self, mock_post):
        response = _response()
        response.json.side_effect = ValueError("no json")
        mock_post.return_value = response
        with pytest.raises(GeminiAPIError):
            GeminiClassifier("k").generate("p")

    @pytest.mark.parametrize("payload", [
        {},
        {"candidates": []},
        {"candidates": [{"content": {}}]},
        {"candidates": [{"content": {"parts": [{"inlineData": {}}]}}]},
    ])
    @patch("gemini_client.requests.post")
    def test_empty_text(self, mock_post, payload):
        mock_post.return_value = _response(payload)
        with pytest.raises(SecondaryClassifierError, match="Empty Gemini response"):
            GeminiClassifier("k").generate("p")


class TestClassify:
    """Test cases for the full classify round trip."""

    @patch("gemini_client.requests.post")
    def test_classify(self, mock_post, candidates):
        mock_post.return_value = _response(_gemini_body("```json\n" + json.dumps(ANSWER) + "\n```"))
        response = GeminiClassifier("k").classify("dQw4w9WgXcQ", candidates)

        assert response.opinions[0].score == 88
        assert response.opinions[0].label == OpinionLabel.BOT
        assert response.verdict.label == BatchVerdictLabel.MIXED

    @patch("gemini_client.requests.post")
    def test_prompt_carries_candidates(self, mock_post, candidates):
        mock_post.return_value = _response(_gemini_body(json.dumps(ANSWER)))
        GeminiClassifier("k").classify("dQw4w9WgXcQ", candidates)

        prompt = mock_post.call_args.kwargs["json"]["contents"][0]["parts"][0]["text"]
        assert "VIDEO_ID: dQw4w9WgXcQ" in prompt
        assert '"ruleScore": 82' in prompt
        assert "sub to my channel" in prompt

    @patch("gemini_client.requests.post")
    def test_unusable_reply(self, mock_post, candidates):
        mock_post.return_value = _response(_gemini_body("Sorry, I can't help with that."))
        with pytest.raises(SecondaryClassifierError):
            GeminiClassifier("k").classify("dQw4w9WgXcQ", candidates)

    @patch("gemini_client.requests.post")
    def test_no_candidates_no_request(self, mock_post):
        response = GeminiClassifier("k").classify("dQw4w9WgXcQ", [])
        assert response.opinions == {}
        assert response.verdict is None
        mock_post.assert_not_called()

    def test_blank_model_uses_default(self):
        assert GeminiClassifier("k", model="").model == "gemini-1.5-flash"
