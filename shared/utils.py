"""
utils.py – small generic helpers reused in multiple services
"""

from __future__ import annotations

import math
from typing import Any, Mapping

from .errors import ValidationError


def as_number(value: Any, name: str = "value") -> float:
    """
    Coerce a venue value to float.  Deriv sends prices as strings
    ("123.45") and epochs as ints; both are fine.  None, bools, empty
    strings, NaN and ±inf are rejected with ValidationError.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{name} is missing or not numeric: {value!r}")
    try:
        num = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} is not numeric: {value!r}") from None
    if not math.isfinite(num):
        raise ValidationError(f"{name} is not finite: {value!r}")
    return num


def require_numbers(record: Any, fields: tuple[str, ...]) -> dict[str, float]:
    """Pull every name in `fields` out of `record` as a float."""
    if not isinstance(record, Mapping):
        raise ValidationError(f"record is not a mapping: {record!r}", record)
    out: dict[str, float] = {}
    for f in fields:
        if f not in record:
            raise ValidationError(f"missing field '{f}'", record)
        try:
            out[f] = as_number(record[f], f)
        except ValidationError as exc:
            exc.record = record
            raise
    return out
