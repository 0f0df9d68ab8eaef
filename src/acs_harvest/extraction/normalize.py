# ABOUTME: Pure text normalization shared by every layout extractor
# ABOUTME: Cleans raw ACS field text and formats canonical SCP identifiers

import re

IDENTIFIER_PREFIX = "SCP-"

# Identifier at the very end of a URL or title, e.g. ".../scp-173"
URL_IDENTIFIER_PATTERN = re.compile(r"\bscp-(\d{1,4})$", re.IGNORECASE)
# Identifier anywhere in free text
TEXT_IDENTIFIER_PATTERN = re.compile(r"\bscp-(\d{1,4})", re.IGNORECASE)

VALID_CONTAINMENT_CLASSES = frozenset({"safe", "euclid", "keter", "neutralized", "pending", "explained", "esoteric"})

SENTINEL_IDENTIFIERS = frozenset({"SCP-000", "SCP-001"})

CLEARANCE_LABELS = {
    "LEVEL 1": "Unrestricted",
    "LEVEL 2": "Restricted",
    "LEVEL 3": "Confidential",
    "LEVEL 4": "Secret",
    "LEVEL 5": "Top Secret",
    "LEVEL 6": "Cosmic Top Secret",
}

_DIGIT = re.compile(r"\d")


def extract_string_after_colon(text: str) -> str:
    """Return the text after the first colon up to the next newline, left-trimmed."""
    _, colon, rest = text.partition(":")
    if not colon:
        return ""
    return rest.split("\n", 1)[0].lstrip()


def _clean_once(text: str) -> str:
    text = text.strip()
    if "{$" in text or text.lower() == "none":
        return ""
    if ":" in text:
        return extract_string_after_colon(text)
    if "/" in text and "n/a" not in text.lower():
        return text.split("/", 1)[1]
    return text


def clean(raw: str) -> str:
    """Normalize a raw field value.

    Rules, in priority order: unresolved ``{$...}`` placeholders and "none" become
    empty; a colon keeps only what follows it on the same line; otherwise a slash
    (outside "n/a") keeps only what follows it. The rules are re-applied until the
    value stops changing, so ``clean(clean(x)) == clean(x)``.

    >>> clean("Containment Class: Keter")
    'Keter'
    >>> clean("2/Vlam")
    'Vlam'
    """
    text = raw
    while True:
        cleaned = _clean_once(text)
        if cleaned == text:
            return cleaned
        text = cleaned


def clearance_level_conversion(raw: str) -> str:
    """Turn any clearance label into ``LEVEL n`` using its first digit."""
    match = _DIGIT.search(raw)
    if match is None:
        return raw
    return f"LEVEL {match.group()}"


def default_clearance_text(clearance_level: str) -> str:
    """Human label for a clearance level when the page did not provide one."""
    return CLEARANCE_LABELS.get(clearance_level, "")


def is_valid_containment_class(value: str) -> bool:
    return value.lower() in VALID_CONTAINMENT_CLASSES


def extract_identifier_number(raw: str, pattern: re.Pattern[str] = URL_IDENTIFIER_PATTERN) -> int | None:
    """Parse the catalog number out of a URL or text, or None if it has none."""
    match = pattern.search(raw)
    if match is None:
        return None
    return int(match.group(1))


def format_identifier(number: int) -> str:
    """Canonical identifier: zero-padded to three digits below 100."""
    if number <= 99:
        return f"{IDENTIFIER_PREFIX}{number:03d}"
    return f"{IDENTIFIER_PREFIX}{number}"
