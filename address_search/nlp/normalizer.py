"""German spelling folding and its best-effort reverse.

``normalize`` folds native spellings to ASCII transliterations
("Straße" -> "strasse"). ``denormalize`` goes the other way for queries typed
without diacritics ("uhlandstrase" -> "uhlandstraße"). The two are not
inverses of each other; denormalization is a guess used to build a fallback
query, never a canonical form.
"""

import re

GERMAN_CHARS_RE = re.compile(r"[ßüöäÜÖÄ]")

NORMALIZE_RULES = (
    ("ß", "ss"),
    ("ü", "ue"),
    ("ö", "oe"),
    ("ä", "ae"),
)

# Order matters: street suffixes first, so the generic ss rule below never
# sees the already rewritten compound forms.
COMPOUND_RULES = (
    (re.compile(r"strasse"), "straße"),
    (re.compile(r"strase"), "straße"),
    (re.compile(r"gasse"), "gaße"),
)

SHARP_S_RULES = (
    (re.compile(r"([a-z])ss([a-z])"), r"\1ß\2"),
    (re.compile(r"^ss([a-z])"), r"ß\1"),
    (re.compile(r"([a-z])ss\Z"), r"\1ß"),
)

UMLAUT_RULES = (
    (re.compile(r"ue"), "ü"),
    (re.compile(r"oe"), "ö"),
    (re.compile(r"ae"), "ä"),
)

DENORMALIZE_PIPELINE = COMPOUND_RULES + SHARP_S_RULES + UMLAUT_RULES


def normalize(text: str) -> str:
    if not text:
        return text
    result = text.lower()
    for native, folded in NORMALIZE_RULES:
        result = result.replace(native, folded)
    return result


def denormalize(text: str) -> str:
    if not text:
        return text
    result = text.lower()
    for pattern, replacement in DENORMALIZE_PIPELINE:
        result = pattern.sub(replacement, result)
    return result


def normalize_for_search(text: str) -> str:
    if not text:
        return ""
    return normalize(text).strip()


def contains_german_chars(text: str) -> bool:
    return bool(text) and GERMAN_CHARS_RE.search(text) is not None
