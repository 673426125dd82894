"""Exception hierarchy for sgdmlp."""

from __future__ import annotations


class SgdMlpError(Exception):
    """Base class for all errors raised by sgdmlp."""


class ShapeMismatchError(SgdMlpError, ValueError):
    """Raised when matrix operands or weights have incompatible dimensions."""


class InvalidConfigurationError(SgdMlpError, ValueError):
    """Raised when training or model settings are rejected at entry."""


class ModelFormatError(SgdMlpError, ValueError):
    """Raised when a persisted weight file cannot be parsed."""


__all__ = [
    "SgdMlpError",
    "ShapeMismatchError",
    "InvalidConfigurationError",
    "ModelFormatError",
]
