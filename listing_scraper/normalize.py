"""Text normalizers shared by the live-page and saved-HTML extraction paths."""

import re

# A number and the scale word glued to it: "1.2m", "450 k", "3 million"
_AMOUNT = r"(\d+(?:\.\d+)?|\.\d+)\s*(?:(million|mil|m|k)\b)?"
_DOLLAR_AMOUNT = re.compile(r"\$\s*" + _AMOUNT)
_FIRST_AMOUNT = re.compile(_AMOUNT)

_SCALE = {"million": 1_000_000, "mil": 1_000_000, "m": 1_000_000, "k": 1_000}


def parse_currency(text: str | None) -> float | None:
    """
    Parse a money string into a number.

    "$1,500" -> 1500.0, "$2.5M" -> 2500000.0, "15k" -> 15000.0.
    The amount right after the first ``$`` is used, or the first number when
    there is no ``$``. An m/mil/million word directly after that number
    scales by one million, a k by one thousand, so trailing notes such as
    "$450K est." or "$1.2M (2023)" keep their scale. Returns None when
    nothing numeric parses.
    """
    if not text:
        return None

    cleaned = text.replace(",", "").lower()
    m = _DOLLAR_AMOUNT.search(cleaned) or _FIRST_AMOUNT.search(cleaned)
    if not m:
        return None

    num = float(m.group(1))
    suffix = m.group(2)
    return num * _SCALE[suffix] if suffix else num


def parse_integer(text: str | None) -> int | None:
    """Drop every non-digit and parse what's left: "1,234 sq ft" -> 1234."""
    if not text:
        return None
    digits = re.sub(r"[^0-9]", "", text)
    return int(digits) if digits else None


def clean_text(text: str | None) -> str:
    if text is None:
        return ""
    return re.sub(r"\s+", " ", text.strip())
