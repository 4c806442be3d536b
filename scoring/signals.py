"""
Signal detectors for single comments.

Each detector inspects one dimension of a comment and returns raw evidence
(a bool, a count, a ratio or the list of matched phrases). Detectors never
raise for string input and treat any non-string value as empty text.
Weighting the evidence is the scorer's job, not the detector's.
"""

from __future__ import annotations

import logging
import re
from typing import List, Sequence, Tuple

import emoji

from scoring.normalizer import URL_PATTERN, as_text

logger = logging.getLogger(__name__)


# =============================================================================
# PHRASE LISTS (matched as substrings of the keyword text; lists are disjoint)
# =============================================================================

CONTACT_BAIT_PHRASES: Tuple[str, ...] = (
    "whatsapp", "telegram", "dm me", "inbox me", "message me", "text me",
    "contact me", "my number", "reach me on", "add me on", "hit me up",
)

SCAM_PHRASES: Tuple[str, ...] = (
    "giveaway", "you have been selected", "you won", "you've won",
    "claim your", "claim now", "free gift", "gift card", "free iphone",
    "congratulations you", "winner", "prize",
)

CRYPTO_PHRASES: Tuple[str, ...] = (
    "crypto", "bitcoin", "btc", "ethereum", "forex", "binary option",
    "investment", "trading signal", "trading bot", "passive income",
    "financial freedom", "double your money", "profit daily",
)

SELF_PROMO_PHRASES: Tuple[str, ...] = (
    "subscribe", "sub4sub", "sub 4 sub", "check out my channel",
    "check my channel", "visit my channel", "my channel", "follow me",
    "promo code", "discount code",
)

ADULT_BAIT_PHRASES: Tuple[str, ...] = (
    "onlyfans", "hot girls", "sexy", "nudes", "dating site", "dating app",
    "18+",
)

PRAISE_WORDS_PATTERN = re.compile(r"\b(nice|great|amazing|love it|awesome|wow)\b")


# =============================================================================
# PATTERNS
# =============================================================================

LINK_PATTERN = URL_PATTERN

EMAIL_PATTERN = re.compile(r"\b[\w.+-]+@[\w-]+(?:\.[\w-]+)*\.[a-z]{2,}\b", re.IGNORECASE)

_NON_PHONE_CHARS = re.compile(r"[^\d+]")
_INTERNATIONAL_NUMBER = re.compile(r"\+\d{8,15}")
_DIGIT_RUN = re.compile(r"(?<!\d)\d{10,15}(?!\d)")

_LATIN_LETTER = re.compile(r"[A-Za-z]")
_LATIN_UPPER = re.compile(r"[A-Z]")

PUNCT_BURST_CHARS = frozenset("!?¡¿‼⁉")

HASHTAG_PATTERN = re.compile(r"#\w+")

# Uppercase ratio is only meaningful with enough letters to judge
UPPERCASE_MIN_LETTERS = 10
SYMBOL_MIN_LENGTH = 10
SYMBOL_LETTER_RATIO = 0.15
VERY_SHORT_LENGTH = 4
VERY_LONG_LENGTH = 280
SHORT_PRAISE_LENGTH = 25


# =============================================================================
# EMOJI COUNTING STRATEGIES
# =============================================================================

class UnicodeDataEmojiCounter:
    """Counts code points listed in the emoji package's Unicode emoji data."""

    name = "unicode-data"

    def __init__(self, emoji_data):
        self._emoji_data = emoji_data

    def count(self, text: str) -> int:
        return sum(
            1 for ch in as_text(text)
            if not ch.isascii() and ch in self._emoji_data
        )


class CodePointRangeEmojiCounter:
    """Counts code points inside the fixed pictographic blocks."""

    name = "code-point-ranges"

    PATTERN = re.compile(
        "["
        "\U0001F000-\U0001FAFF"  # Mahjong .. Symbols and Pictographs Extended-A
        "\u2600-\u27BF"  # Misc symbols, Dingbats
        "\u2300-\u23FF"  # Misc technical (watch, hourglass)
        "\u2B05-\u2B55"  # Arrows, stars, circles
        "\u2190-\u21FF"  # Arrows
        "\u3030\u303D\u3297\u3299"
        "\u00A9\u00AE\u203C\u2049\u2122\u2139"
        "]"
    )

    def count(self, text: str) -> int:
        return len(self.PATTERN.findall(as_text(text)))


def select_emoji_counter():
    """
    Choose the emoji strategy supported by the installed emoji data.

    The emoji package exposes its table as ``EMOJI_DATA`` from 1.0 onwards;
    older releases fall back to the fixed code-point ranges.
    """
    emoji_data = getattr(emoji, "EMOJI_DATA", None)
    if isinstance(emoji_data, dict) and emoji_data:
        counter = UnicodeDataEmojiCounter(emoji_data)
    else:
        counter = CodePointRangeEmojiCounter()
    logger.debug(f"Emoji detection strategy: {counter.name}")
    return counter


EMOJI_COUNTER = select_emoji_counter()


# =============================================================================
# DETECTORS
# =============================================================================

def count_links(text: str) -> int:
    """Number of distinct URL-like substrings (case-insensitive)."""
    return len({m.group(0).lower() for m in LINK_PATTERN.finditer(as_text(text))})


def match_phrases(keyword_text: str, phrases: Sequence[str]) -> List[str]:
    """Phrases contained in the keyword text, in list order."""
    keyword_text = as_text(keyword_text)
    if not keyword_text:
        return []
    return [phrase for phrase in phrases if phrase in keyword_text]


def contact_bait(keyword_text: str) -> List[str]:
    return match_phrases(keyword_text, CONTACT_BAIT_PHRASES)


def scam_phrases(keyword_text: str) -> List[str]:
    return match_phrases(keyword_text, SCAM_PHRASES)


def crypto_phrases(keyword_text: str) -> List[str]:
    return match_phrases(keyword_text, CRYPTO_PHRASES)


def self_promo_phrases(keyword_text: str) -> List[str]:
    return match_phrases(keyword_text, SELF_PROMO_PHRASES)


def adult_bait(keyword_text: str) -> List[str]:
    return match_phrases(keyword_text, ADULT_BAIT_PHRASES)


def has_email(text: str) -> bool:
    return EMAIL_PATTERN.search(as_text(text)) is not None


def has_phone_number(text: str) -> bool:
    """
    Phone-like digits: the whole comment reduced to digits and '+' is an
    international number, or the raw text holds a run of 10-15 digits.
    """
    text = as_text(text)
    stripped = _NON_PHONE_CHARS.sub("", text)
    if _INTERNATIONAL_NUMBER.fullmatch(stripped):
        return True
    return _DIGIT_RUN.search(text) is not None


def count_emoji(text: str, counter=None) -> int:
    """Number of pictographic code points in the raw text."""
    return (counter or EMOJI_COUNTER).count(text)


def latin_letter_count(text: str) -> int:
    return len(_LATIN_LETTER.findall(as_text(text)))


def uppercase_ratio(text: str) -> float:
    """Uppercase share of Latin letters; 0.0 when there are none."""
    text = as_text(text)
    letters = latin_letter_count(text)
    if letters == 0:
        return 0.0
    return len(_LATIN_UPPER.findall(text)) / letters


def punctuation_count(text: str) -> int:
    return sum(1 for ch in as_text(text) if ch in PUNCT_BURST_CHARS)


def longest_char_run(text: str) -> int:
    """Length of the longest run of one repeated non-space character."""
    longest = 0
    current = 0
    previous = None
    for ch in as_text(text):
        if ch.isspace():
            current = 0
            previous = None
            continue
        if ch == previous:
            current += 1
        else:
            current = 1
            previous = ch
        if current > longest:
            longest = current
    return longest


def repeated_word_count(text: str) -> int:
    """Number of words equal to the word right before them."""
    words = as_text(text).lower().split()
    return sum(1 for prev, word in zip(words, words[1:]) if prev == word)


def hashtag_count(text: str) -> int:
    return len(HASHTAG_PATTERN.findall(as_text(text)))


def is_symbol_dominant(text: str) -> bool:
    """Letters make up under 15% of a comment at least 10 characters long."""
    text = as_text(text).strip()
    if len(text) < SYMBOL_MIN_LENGTH:
        return False
    letters = sum(1 for ch in text if ch.isalpha())
    return letters / len(text) < SYMBOL_LETTER_RATIO


def length_extreme(text: str) -> str:
    """'short', 'long' or '' depending on the trimmed length."""
    length = len(as_text(text).strip())
    if length <= VERY_SHORT_LENGTH:
        return "short"
    if length >= VERY_LONG_LENGTH:
        return "long"
    return ""


def is_generic_short_praise(text: str) -> bool:
    text = as_text(text)
    if len(text) > SHORT_PRAISE_LENGTH:
        return False
    return PRAISE_WORDS_PATTERN.search(text.lower().strip()) is not None
