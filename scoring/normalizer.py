"""
Text normalization for fingerprinting and phrase matching.

Two normal forms are produced from a comment body:

    fingerprint_text  - case-folded, Unicode-normalized, with URLs, @mentions,
                        #hashtags and punctuation replaced by spaces. Used as
                        the template key for duplicate detection.
    keyword_text      - case-folded, Unicode-normalized, URLs and @mentions
                        stripped, punctuation kept. Used by phrase detectors.

Both are pure, total over arbitrary Unicode input and idempotent.
"""

import re
import unicodedata
from typing import Dict, FrozenSet

# Zero-width and invisible characters used to break up repeated templates
ZERO_WIDTH_CHARS: FrozenSet[str] = frozenset({
    '\u200B',  # Zero-width space
    '\u200C',  # Zero-width non-joiner
    '\u200D',  # Zero-width joiner
    '\u2060',  # Word joiner
    '\uFEFF',  # Zero-width no-break space (BOM)
    '\u00AD',  # Soft hyphen
    '\u034F',  # Combining grapheme joiner
    '\u2061',  # Function application
    '\u2062',  # Invisible times
    '\u2063',  # Invisible separator
    '\u2064',  # Invisible plus
})

# Cyrillic/Greek lowercase letters that render like Latin ones
_LOWER_HOMOGLYPHS: Dict[str, str] = {
    # Cyrillic
    'а': 'a', 'с': 'c', 'е': 'e', 'о': 'o', 'р': 'p',
    'х': 'x', 'у': 'y', 'і': 'i', 'ј': 'j', 'ѕ': 's',
    'һ': 'h', 'ԁ': 'd', 'ԛ': 'q', 'ԝ': 'w',
    # Greek
    'α': 'a', 'ο': 'o', 'ρ': 'p', 'τ': 't', 'υ': 'u', 'ν': 'v',
}

# Uppercase forms map too, so case folding can never reintroduce a homoglyph
HOMOGLYPHS: Dict[str, str] = dict(_LOWER_HOMOGLYPHS)
HOMOGLYPHS.update({
    k.upper(): v.upper()
    for k, v in _LOWER_HOMOGLYPHS.items()
    if len(k.upper()) == 1 and k.upper() != k
})

_TRANSLATION = str.maketrans({
    **HOMOGLYPHS,
    **{ch: None for ch in ZERO_WIDTH_CHARS},
})

SHORTENER_DOMAINS = (
    "bit.ly", "tinyurl.com", "t.co", "goo.gl", "ow.ly", "buff.ly",
    "rebrand.ly", "cutt.ly", "rb.gy", "is.gd", "t.me", "wa.me",
    "linktr.ee", "shorturl.at",
)

LINK_TLDS = (
    "com", "net", "org", "io", "ru", "xyz", "top", "info", "biz", "me",
    "co", "ly", "gg", "site", "online", "click", "link", "shop",
)

# Anything the link detector counts is also stripped from both normal forms.
# One left-to-right scan; alternation order decides which shape claims the span
URL_PATTERN = re.compile(
    r"https?://\S+"
    r"|www\.\S+"
    r"|\byoutu\.be/\S*"
    r"|\byoutube\.com/\S*"
    r"|\b(?:" + "|".join(re.escape(d) for d in SHORTENER_DOMAINS) + r")/\S*"
    r"|(?<![@\w.-])[a-z0-9-]+(?:\.[a-z0-9-]+)*\.(?:" + "|".join(LINK_TLDS) + r")\b(?:/\S*)?",
    re.IGNORECASE,
)
MENTION_PATTERN = re.compile(r"@\w[\w.-]*")
HASHTAG_PATTERN = re.compile(r"#\w+")
_WHITESPACE = re.compile(r"\s+")


def as_text(value: object) -> str:
    """Return value if it is a string, otherwise the empty string."""
    return value if isinstance(value, str) else ""


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace to one space and trim."""
    return _WHITESPACE.sub(" ", as_text(text)).strip()


def fold_text(text: str) -> str:
    """
    Case-fold and Unicode-normalize text.

    Zero-width characters are dropped and homoglyphs mapped to Latin before
    NFKC so that "Ѕubscribe" and "Subscribe" fold to the same string.
    """
    folded = as_text(text).translate(_TRANSLATION)
    folded = unicodedata.normalize("NFKC", folded)
    folded = unicodedata.normalize("NFKC", folded.casefold())
    # NFKC can surface new homoglyphs (e.g. U+03F1 -> rho); map once more
    folded = folded.translate(_TRANSLATION)
    return unicodedata.normalize("NFKC", folded)


def _strip_punctuation(text: str) -> str:
    return "".join(
        " " if unicodedata.category(ch).startswith("P") else ch
        for ch in text
    )


def fingerprint_text(text: str) -> str:
    """
    Build the duplicate-detection key for a comment body.

    Args:
        text: Raw comment text (non-strings are treated as empty)

    Returns:
        Normalized fingerprint, possibly empty
    """
    folded = fold_text(text)
    folded = URL_PATTERN.sub(" ", folded)
    folded = MENTION_PATTERN.sub(" ", folded)
    folded = HASHTAG_PATTERN.sub(" ", folded)
    return collapse_whitespace(_strip_punctuation(folded))


def keyword_text(text: str) -> str:
    """
    Build the phrase-matching form of a comment body.

    Punctuation is kept so phrase lists can rely on it ("18+", "dm me!").
    """
    folded = fold_text(text)
    folded = URL_PATTERN.sub(" ", folded)
    folded = MENTION_PATTERN.sub(" ", folded)
    return collapse_whitespace(folded)
