"""
Gemini second-opinion classifier.

Sends the highest-scoring candidates to the Gemini generateContent endpoint
and turns the reply into a sanitized ClassifierResponse.
"""

import json
import logging
from typing import Any, Dict, Sequence

import requests

from core.constants import (
    GEMINI_API_BASE,
    GEMINI_DEFAULT_MODEL,
    GEMINI_MAX_OUTPUT_TOKENS,
    GEMINI_TEMPERATURE,
    GEMINI_TIMEOUT,
)
from scoring.secondary import (
    CandidateItem,
    ClassifierResponse,
    SecondaryClassifierError,
    build_request_items,
    parse_classifier_text,
)

logger = logging.getLogger(__name__)


class GeminiAPIError(SecondaryClassifierError):
    """Gemini request failed (transport error or non-2xx status)."""
    pass


PROMPT_TEMPLATE = """You are a bot-detection system.

TASK:
Analyze YouTube comments and decide whether they are bot-generated or human.

STRICT RULES:
- Output ONLY valid JSON
- No markdown
- No explanation outside JSON
- Follow the schema EXACTLY

SCHEMA:
{{
  "summary": {{
    "verdict": "bot-heavy" | "mixed" | "mostly-human",
    "confidence": number
  }},
  "per_comment": [
    {{
      "idx": number,
      "ai_score": number,
      "label": "bot" | "human" | "uncertain",
      "reason": string
    }}
  ]
}}

VIDEO_ID: {video_id}

COMMENTS:
{comments}
"""


class GeminiClassifier:
    """
    Secondary classifier backed by Google Gemini.

    Usage:
        classifier = GeminiClassifier(api_key)
        response = classifier.classify(video_id, candidates)
    """

    def __init__(
        self,
        api_key: str,
        model: str = GEMINI_DEFAULT_MODEL,
        timeout: float = GEMINI_TIMEOUT,
    ):
        self.api_key = api_key
        self.model = model or GEMINI_DEFAULT_MODEL
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{GEMINI_API_BASE}/{self.model}:generateContent"

    def build_prompt(self, video_id: str, candidates: Sequence[CandidateItem]) -> str:
        items = build_request_items(candidates)
        return PROMPT_TEMPLATE.format(
            video_id=video_id,
            comments=json.dumps(items, indent=2, ensure_ascii=False),
        )

    def build_body(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": prompt}],
                }
            ],
            "generationConfig": {
                "temperature": GEMINI_TEMPERATURE,
                "maxOutputTokens": GEMINI_MAX_OUTPUT_TOKENS,
            },
        }

    def generate(self, prompt: str) -> str:
        """
        Run one generateContent call and return the joined text parts.

        Raises:
            GeminiAPIError: On transport failure, non-2xx status or a non-JSON body
            SecondaryClassifierError: If the model returned no text
        """
        try:
            response = requests.post(
                self.endpoint,
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json=self.build_body(prompt),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Gemini request failed: {e}")
            raise GeminiAPIError(f"Gemini request failed: {e}") from e

        if not response.ok:
            logger.error(f"Gemini HTTP error {response.status_code}")
            raise GeminiAPIError(f"Gemini HTTP error {response.status_code}: {response.text[:200]}")

        try:
            raw = response.json()
        except ValueError as e:
            raise GeminiAPIError("Gemini returned a non-JSON body") from e

        text = self._extract_text(raw)
        if not text:
            raise SecondaryClassifierError("Empty Gemini response")
        return text

    def classify(self, video_id: str, candidates: Sequence[CandidateItem]) -> ClassifierResponse:
        """
        Ask Gemini for a second opinion on the candidates.

        Args:
            video_id: Video the comments belong to
            candidates: Index-addressed candidates from select_candidates

        Returns:
            Sanitized ClassifierResponse

        Raises:
            SecondaryClassifierError: If the reply can't be used at all
        """
        if not candidates:
            return ClassifierResponse()

        logger.info(f"Requesting Gemini opinion on {len(candidates)} comments ({self.model})")
        text = self.generate(self.build_prompt(video_id, candidates))

        try:
            return parse_classifier_text(text)
        except SecondaryClassifierError:
            logger.debug(f"Raw Gemini output: {text[:500]}")
            raise

    @staticmethod
    def _extract_text(raw: Any) -> str:
        """Join candidates[0].content.parts[].text; empty if the shape is off."""
        if not isinstance(raw, dict):
            return ""
        candidates = raw.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return ""
        first = candidates[0] if isinstance(candidates[0], dict) else {}
        content = first.get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return ""
        return "".join(
            part["text"] for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
