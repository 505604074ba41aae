"""
Amount coercion helpers.

Third-party billing APIs report money as numbers, numeric strings, nested
``{"value": ...}`` objects, or not at all. These helpers turn all of that
into finite floats without ever raising.
"""

import math
import re
from collections.abc import Iterable, Mapping
from typing import Any


def extract_amount(value: Any) -> float:
    """Extract a finite number from an arbitrary JSON value.

    Numbers are returned as-is when finite, strings are parsed as floats,
    mappings with a ``value`` key are unwrapped recursively. Everything
    else (including non-finite results) becomes ``0.0``.
    """
    if isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
        return number if math.isfinite(number) else 0.0

    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
        return number if math.isfinite(number) else 0.0

    if isinstance(value, Mapping) and "value" in value:
        return extract_amount(value["value"])

    return 0.0


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def field_variants(field: str) -> tuple[str, ...]:
    """Return ``field`` followed by its other-case spelling, if different."""
    variants = [field]
    for variant in (_camel_case(field), _snake_case(field)):
        if variant not in variants:
            variants.append(variant)
    return tuple(variants)


def sum_amounts(
    records: Any,
    field: str,
    *,
    either_case: bool = False,
) -> float:
    """Sum ``extract_amount(record[field])`` over a list of records.

    Elements that are not mappings, or lack the field, contribute nothing.
    With ``either_case`` the snake_case and camelCase spellings of ``field``
    are both accepted (first match wins per record).
    """
    if not isinstance(records, Iterable) or isinstance(records, (str, bytes, Mapping)):
        return 0.0

    keys = field_variants(field) if either_case else (field,)
    total = 0.0

    for record in records:
        if not isinstance(record, Mapping):
            continue
        for key in keys:
            if key in record:
                total += extract_amount(record[key])
                break

    return total


def usage_percentage(current: Any, limit: Any) -> float:
    """Percentage of ``limit`` consumed, clamped to [0, 100]."""
    used = extract_amount(current)
    cap = extract_amount(limit)
    if cap <= 0:
        return 0.0
    return min(max(used / cap * 100, 0.0), 100.0)


def minor_to_major(value: Any) -> float:
    """Convert a minor-unit amount (cents) to major units."""
    return extract_amount(value) / 100
