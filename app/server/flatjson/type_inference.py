"""
Type inference for string values.

infer_type is meant to be plugged into a Flattener as its value transform:

    >>> Flattener().with_type_inference().flatten({"a": "1", "b": "1.5", "c": "true"})
    {'a': 1, 'b': 1.5, 'c': True}
"""

import math
import re
from typing import Any, Optional

from .constants import INT64_MAX, INT64_MIN

INTEGER_RE = re.compile(r'[+-]?[0-9]+')
FLOAT_RE = re.compile(
    r'[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|[+-]?(?:inf|infinity|nan)',
    re.IGNORECASE
)
BOOLEANS = {'true': True, 'false': False}


def parse_int64(text: str) -> Optional[int]:
    """Parse a 64-bit signed integer, or return None."""
    if not INTEGER_RE.fullmatch(text):
        return None
    value = int(text)
    if INT64_MIN <= value <= INT64_MAX:
        return value
    return None


def parse_float(text: str) -> Optional[float]:
    """
    Parse a finite double, or return None.

    Only plain decimal and exponent notation is accepted: no surrounding
    whitespace and no ``_`` digit separators. Values that are not finite
    (``nan``, ``inf``, or anything overflowing to infinity) are rejected
    since JSON has no representation for them.
    """
    if not FLOAT_RE.fullmatch(text):
        return None
    value = float(text)
    if not math.isfinite(value):
        return None
    return value


def infer_type(value: Any) -> Any:
    """
    Reinterpret a string as an integer, a float or a boolean.

    The first parse that succeeds wins, in that order; strings that parse as
    none of them, and all non-string values, are returned unchanged.
    """
    if not isinstance(value, str):
        return value

    as_int = parse_int64(value)
    if as_int is not None:
        return as_int

    as_float = parse_float(value)
    if as_float is not None:
        return as_float

    return BOOLEANS.get(value, value)
