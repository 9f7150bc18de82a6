"""Serializer-backed validation with a tagged result.

Input rules live on DRF serializers. ``validate_payload`` runs one and
returns :class:`Valid` or :class:`Invalid`, so non-HTTP callers (the post
editor) and the API share the same rule set. ``parse_payload`` raises
:class:`core.exceptions.ValidationError` carrying the first violation, which
is the only message the API reports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, NamedTuple

from rest_framework import serializers
from rest_framework.settings import api_settings

from .exceptions import ValidationError


class FieldError(NamedTuple):
    field: str
    message: str


@dataclass(frozen=True)
class Valid:
    data: dict[str, Any]

    ok = True


@dataclass(frozen=True)
class Invalid:
    errors: tuple[FieldError, ...]

    ok = False

    @property
    def first_error(self) -> FieldError:
        return self.errors[0]


def _messages(detail: Any) -> Iterator[str]:
    # ListField/DictField nest their errors by index or key.
    if isinstance(detail, dict):
        for value in detail.values():
            yield from _messages(value)
    elif isinstance(detail, (list, tuple)):
        for value in detail:
            yield from _messages(value)
    else:
        yield str(detail)


def flatten_errors(errors: Any) -> tuple[FieldError, ...]:
    """``serializer.errors`` as ordered (field, message) pairs."""
    if not isinstance(errors, dict):
        errors = {api_settings.NON_FIELD_ERRORS_KEY: errors}
    return tuple(
        FieldError(str(field), message)
        for field, detail in errors.items()
        for message in _messages(detail)
    )


def validate_payload(
    serializer_class: type[serializers.Serializer],
    payload: Any,
    partial: bool = False,
    **kwargs,
) -> Valid | Invalid:
    """Run ``serializer_class`` over ``payload`` without raising."""
    serializer = serializer_class(data=payload, partial=partial, **kwargs)
    if serializer.is_valid():
        return Valid(dict(serializer.validated_data))
    return Invalid(flatten_errors(serializer.errors))


def parse_payload(
    serializer_class: type[serializers.Serializer],
    payload: Any,
    partial: bool = False,
    **kwargs,
) -> dict[str, Any]:
    result = validate_payload(serializer_class, payload, partial=partial, **kwargs)
    if isinstance(result, Invalid):
        raise ValidationError(result.first_error.message, errors=result.errors)
    return result.data


def not_blank(message: str):
    """Validator rejecting whitespace-only strings on fields that keep whitespace."""

    def _check(value: str) -> None:
        if not value.strip():
            raise serializers.ValidationError(message)

    return _check


def max_bytes(limit: int, message: str):
    """Validator capping the UTF-8 encoded length of a string."""

    def _check(value: str) -> None:
        if len(value.encode("utf-8")) > limit:
            raise serializers.ValidationError(message)

    return _check


__all__ = [
    "FieldError",
    "Invalid",
    "Valid",
    "flatten_errors",
    "max_bytes",
    "not_blank",
    "parse_payload",
    "validate_payload",
]
