"""Decode errors raised by the /proc decoders."""


class DecodeError(ValueError):
    """Base class for every failure to decode a /proc pseudo-file."""


class UnexpectedFormatError(DecodeError):
    """A required literal token or tag did not match."""

    def __init__(self, expected: str, found: str) -> None:
        self.expected = expected
        self.found = found
        super().__init__(f"expected {expected!r}, found {found!r}")


class ShortReadError(DecodeError):
    """Fewer fields were available than the format's fixed arity."""

    def __init__(self, parsed: int, expected: int) -> None:
        self.parsed = parsed
        self.expected = expected
        super().__init__(f"parsed only {parsed} fields out of {expected}")


class FieldConversionError(DecodeError):
    """A token could not be converted to its field's declared type."""

    def __init__(self, field: str, position: int, token: str, reason: str) -> None:
        self.field = field
        self.position = position
        self.token = token
        self.reason = reason
        super().__init__(f"field {position} ({field}): {reason}: {token!r}")
