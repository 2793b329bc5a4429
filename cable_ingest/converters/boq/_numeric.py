"""Locale-tolerant numeric coercion for spreadsheet cells.

BOQ sheets mix genuine numeric cells with text such as ``"Rp 1.250.000"``,
``"Rp 25.000,-"``, ``"$1,250.50"``, ``"2,5"`` or ``"10 m"``. Only the
leading number is read, so unit suffixes and the accounting dash are
ignored. Separators are resolved by position:

- both ``.`` and ``,`` present: the last one is the decimal separator
- one kind repeated (``1.250.000``): thousands separator
- a single separator followed by exactly three digits, with a non-zero
  integer part (``1.250``, ``12,500``): thousands separator
- any other single separator (``2,5``, ``0.250``): decimal point

Anything that still fails to parse yields 0.0.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal

_CURRENCY = re.compile(r"rp\.?|[$€£]", re.IGNORECASE)
_LEADING_NUMBER = re.compile(r"[+-]?[\d.,]*\d")
_THOUSANDS_GROUP = re.compile(r"^[+-]?[1-9]\d{0,2}[.,]\d{3}$")


def parse_numeric(value: object) -> float:
    """Coerce a spreadsheet cell to ``float``.

    Numbers pass through unchanged; strings are cleaned and their leading
    number parsed; everything else (blank cells, booleans, dates) is 0.0.
    Never raises and never returns NaN or infinity.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
        return number if math.isfinite(number) else 0.0
    if not isinstance(value, str):
        return 0.0

    text = normalize_number_text(value)
    if not text:
        return 0.0
    try:
        number = float(text)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def normalize_number_text(text: str) -> str:
    """Extract the leading number and rewrite separators to Python syntax.

    Returns an empty string when the text does not start with a number
    once currency and whitespace are removed.

    >>> normalize_number_text("Rp 1.250.000")
    '1250000'
    >>> normalize_number_text("Rp 25.000,-")
    '25000'
    >>> normalize_number_text("1.250,75 m2")
    '1250.75'
    """
    cleaned = _CURRENCY.sub("", text)
    cleaned = "".join(cleaned.split())

    match = _LEADING_NUMBER.match(cleaned)
    if match is None:
        return ""
    number = match.group()

    dots = number.count(".")
    commas = number.count(",")

    if dots and commas:
        decimal = "." if number.rfind(".") > number.rfind(",") else ","
        thousands = "," if decimal == "." else "."
        return number.replace(thousands, "").replace(decimal, ".")

    separator = "." if dots else "," if commas else ""
    if not separator:
        return number

    if number.count(separator) > 1 or _THOUSANDS_GROUP.match(number):
        return number.replace(separator, "")
    return number.replace(separator, ".")
