"""Typed conversion of /proc tokens to fixed-width numeric fields."""

import re
from enum import Enum

from pyprocfs.errors import FieldConversionError

_UNSIGNED_RE = re.compile(r"[0-9]+")
_SIGNED_RE = re.compile(r"[-+]?[0-9]+")
_FLOAT_RE = re.compile(r"[-+]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][-+]?[0-9]+)?")


class FieldType(Enum):
    """Declared type of a positional field, named after its kernel width."""

    I32 = "i32"
    I64 = "i64"
    U32 = "u32"
    U64 = "u64"
    FLOAT = "float"
    CHAR = "char"
    TEXT = "text"

    @property
    def bounds(self) -> tuple[int, int] | None:
        """Inclusive (min, max) for integer types, None otherwise."""
        return _BOUNDS.get(self)


_BOUNDS = {
    FieldType.I32: (-(2**31), 2**31 - 1),
    FieldType.I64: (-(2**63), 2**63 - 1),
    FieldType.U32: (0, 2**32 - 1),
    FieldType.U64: (0, 2**64 - 1),
}


def convert(token: str, field_type: FieldType, name: str, position: int) -> int | float | str:
    """
    Convert one raw token to the Python value of its declared type.

    Args:
        token: Raw token text, already split out of the line.
        field_type: Declared type of the field.
        name: Field name, used in error reports.
        position: 1-based position of the field in its format.

    Raises:
        FieldConversionError: If the token is not a valid literal of the
            declared type or does not fit its width.
    """
    if field_type is FieldType.TEXT:
        return token

    if field_type is FieldType.CHAR:
        if len(token) != 1:
            raise FieldConversionError(name, position, token, "expected a single character")
        return token

    if field_type is FieldType.FLOAT:
        if not _FLOAT_RE.fullmatch(token):
            raise FieldConversionError(name, position, token, "invalid float")
        value = float(token)
        # Loads and seconds are never negative.
        if value < 0:
            raise FieldConversionError(name, position, token, "negative value")
        return value

    low, high = field_type.bounds
    pattern = _SIGNED_RE if low < 0 else _UNSIGNED_RE
    if not pattern.fullmatch(token):
        raise FieldConversionError(name, position, token, f"invalid {field_type.value} integer")
    value = int(token)
    if not low <= value <= high:
        raise FieldConversionError(name, position, token, f"out of range for {field_type.value}")
    return value
