"""
Secondary classifier contract.

The heuristic score is never replaced. A capped subset of the highest
scoring comments is sent to an external semantic classifier; its answers
come back keyed by candidate index and are attached to the matching
ScoredComment as a SecondaryOpinion.

Request item (one per candidate):
    {"idx", "author", "text", "likes", "publishedAt", "ruleScore", "flags"}

Response:
    {
      "summary": {"verdict": "bot-heavy" | "mixed" | "mostly-human", "confidence": 0-100},
      "per_comment": [{"idx", "ai_score", "label", "reason"}, ...]
    }

Responses are sanitized field by field: unknown indices are ignored,
scores clamped, unknown labels become "uncertain". Only a response with no
recoverable JSON object raises SecondaryClassifierError.
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from core.constants import (
    SECONDARY_CANDIDATE_LIMIT,
    SECONDARY_REASON_LIMIT,
    SECONDARY_TEXT_LIMIT,
)
from scoring.models import OpinionLabel, ScoredComment, SecondaryOpinion, clamp_score

logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================

class SecondaryClassifierError(Exception):
    """The secondary classifier response could not be used at all."""
    pass


# =============================================================================
# DATA CLASSES
# =============================================================================

class BatchVerdictLabel(Enum):
    """Overall verdict for the candidate set."""
    BOT_HEAVY = "bot-heavy"
    MIXED = "mixed"
    MOSTLY_HUMAN = "mostly-human"


@dataclass(frozen=True)
class BatchVerdict:
    label: BatchVerdictLabel
    confidence: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"verdict": self.label.value, "confidence": self.confidence}


@dataclass(frozen=True)
class CandidateItem:
    """Reduced, index-addressed view of a scored comment sent for a second opinion."""
    index: int
    author: str
    text: str
    likes: int
    published_at: str
    heuristic_score: int
    flags: Tuple[str, ...]

    def to_payload(self) -> Dict[str, Any]:
        return {
            "idx": self.index,
            "author": self.author,
            "text": self.text,
            "likes": self.likes,
            "publishedAt": self.published_at,
            "ruleScore": self.heuristic_score,
            "flags": list(self.flags),
        }


@dataclass(frozen=True)
class ClassifierResponse:
    """Sanitized classifier answer."""
    opinions: Dict[int, SecondaryOpinion] = field(default_factory=dict)
    verdict: Optional[BatchVerdict] = None


# =============================================================================
# REQUEST
# =============================================================================

def truncate(text: str, limit: int) -> str:
    text = text if isinstance(text, str) else ""
    if len(text) <= limit:
        return text
    return text[: max(0, limit - 1)].rstrip() + "…"


def select_candidates(
    scored: Sequence[ScoredComment],
    limit: int = SECONDARY_CANDIDATE_LIMIT,
    text_limit: int = SECONDARY_TEXT_LIMIT,
) -> List[CandidateItem]:
    """
    Pick the highest-scoring comments for a second opinion.

    Ties keep batch order. Each candidate's index is its position in
    ``scored``, which is how answers are matched back.
    """
    positions = sorted(range(len(scored)), key=lambda i: scored[i].bot_score, reverse=True)
    candidates = []
    for position in positions[: max(0, limit)]:
        item = scored[position]
        candidates.append(CandidateItem(
            index=position,
            author=item.comment.author_name,
            text=truncate(item.comment.text, text_limit),
            likes=item.comment.like_count,
            published_at=item.comment.published_at,
            heuristic_score=item.bot_score,
            flags=item.flags,
        ))
    return candidates


def build_request_items(candidates: Sequence[CandidateItem]) -> List[Dict[str, Any]]:
    return [c.to_payload() for c in candidates]


# =============================================================================
# RESPONSE PARSING
# =============================================================================

_FENCE_OPEN = re.compile(r"^```[\w-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?[ \t]*```$")
_INTEGER = re.compile(r"-?[0-9]+")


def find_json_object(text: str) -> Optional[str]:
    """
    First balanced ``{...}`` span in text, or None.

    Braces inside JSON string literals are ignored.
    """
    start = text.find("{")
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaped = False
    for pos in range(start, len(text)):
        ch = text[pos]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start: pos + 1]
    return None


def extract_json_payload(text: str) -> Dict[str, Any]:
    """
    Recover the JSON object from a classifier reply.

    Code fences are stripped first; if the remainder still isn't JSON, the
    first balanced object embedded in the prose is parsed instead. A bare
    JSON list is taken as the per-comment list.

    Raises:
        SecondaryClassifierError: If no JSON object can be recovered
    """
    if not isinstance(text, str) or not text.strip():
        raise SecondaryClassifierError("Empty secondary classifier response")

    body = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text.strip())).strip()

    # JSONDecodeError is a ValueError; oversized integer literals raise the
    # plain ValueError and very deep nesting raises RecursionError
    try:
        payload = json.loads(body)
    except (ValueError, RecursionError):
        span = find_json_object(body)
        if span is None:
            raise SecondaryClassifierError("No JSON object found in secondary classifier response")
        try:
            payload = json.loads(span)
        except (ValueError, RecursionError) as e:
            raise SecondaryClassifierError(f"Secondary classifier response is not valid JSON: {e}") from e

    if isinstance(payload, list):
        payload = {"per_comment": payload}
    if not isinstance(payload, dict):
        raise SecondaryClassifierError(
            f"Secondary classifier response is a JSON {type(payload).__name__}, expected an object"
        )
    return payload


def _coerce_index(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INTEGER.fullmatch(value.strip()):
        return int(value.strip())
    return None


def _coerce_score(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, (int, float)) and math.isfinite(value):
        return clamp_score(value)
    return None


def _coerce_reason(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return truncate(value.strip(), SECONDARY_REASON_LIMIT)


def _parse_verdict(raw: Any) -> Optional[BatchVerdict]:
    if not isinstance(raw, dict):
        return None
    label = raw.get("verdict")
    if not isinstance(label, str):
        return None
    try:
        verdict_label = BatchVerdictLabel(label.strip().lower())
    except ValueError:
        logger.warning(f"Ignoring unknown batch verdict: {label!r}")
        return None
    return BatchVerdict(label=verdict_label, confidence=_coerce_score(raw.get("confidence")))


def parse_classifier_response(payload: Dict[str, Any]) -> ClassifierResponse:
    """
    Sanitize a decoded classifier payload.

    Entries without a usable index are dropped; the first entry for an
    index wins.
    """
    entries = payload.get("per_comment")
    if entries is None:
        entries = payload.get("comments", [])
    if not isinstance(entries, list):
        logger.warning("Secondary classifier per-comment list is not a list, ignoring it")
        entries = []

    opinions: Dict[int, SecondaryOpinion] = {}
    dropped = 0
    for raw in entries:
        if not isinstance(raw, dict):
            dropped += 1
            continue
        index = _coerce_index(raw.get("idx", raw.get("index")))
        if index is None or index in opinions:
            dropped += 1
            continue
        opinions[index] = SecondaryOpinion(
            score=_coerce_score(raw.get("ai_score", raw.get("score"))),
            label=OpinionLabel.parse(raw.get("label")),
            reason=_coerce_reason(raw.get("reason")),
        )

    if dropped:
        logger.warning(f"Dropped {dropped} malformed secondary classifier entr{'y' if dropped == 1 else 'ies'}")

    return ClassifierResponse(opinions=opinions, verdict=_parse_verdict(payload.get("summary")))


def parse_classifier_text(text: str) -> ClassifierResponse:
    """Extract and sanitize a raw classifier reply."""
    return parse_classifier_response(extract_json_payload(text))


# =============================================================================
# MERGE
# =============================================================================

def merge_opinions(
    scored: Sequence[ScoredComment],
    candidates: Sequence[CandidateItem],
    response: ClassifierResponse,
) -> List[ScoredComment]:
    """
    Attach opinions to candidates by index.

    Candidates without an answer get the uncertain placeholder; comments
    that were not candidates carry no opinion; answers for indices that
    were not sent are ignored.
    """
    merged = list(scored)
    candidate_indices = {c.index for c in candidates if 0 <= c.index < len(merged)}

    unknown = set(response.opinions) - candidate_indices
    if unknown:
        logger.warning(f"Ignoring {len(unknown)} secondary opinion(s) for unknown indices")

    for index in sorted(candidate_indices):
        opinion = response.opinions.get(index, SecondaryOpinion.placeholder())
        merged[index] = merged[index].with_opinion(opinion)

    return merged
