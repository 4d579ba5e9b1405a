"""Identifier casing rules applied to table, column, and file names."""

from __future__ import annotations

from enum import Enum


class CasingMode(str, Enum):
    """Casing rule applied to a database identifier."""

    AS_IS = "as_is"
    SNAKE_TO_UPPER_CAMEL = "snake_to_upper_camel"
    SNAKE_TO_LOWER_CAMEL = "snake_to_lower_camel"
    CAMEL_TO_SNAKE = "camel_to_snake"


def _snake_segments(identifier: str) -> list[str]:
    return [segment for segment in identifier.split("_") if segment]


def _to_upper_camel(identifier: str) -> str:
    return "".join(
        segment[:1].upper() + segment[1:] for segment in _snake_segments(identifier)
    )


def _to_lower_camel(identifier: str) -> str:
    parts: list[str] = []
    for index, segment in enumerate(_snake_segments(identifier)):
        head = segment[:1].lower() if index == 0 else segment[:1].upper()
        parts.append(head + segment[1:])
    return "".join(parts)


def _to_snake(identifier: str) -> str:
    chars: list[str] = []
    for index, char in enumerate(identifier):
        if char.isupper():
            if index != 0:
                chars.append("_")
            chars.append(char.lower())
        else:
            chars.append(char)
    return "".join(chars)


def format_name(identifier: str, mode: CasingMode) -> str:
    """Apply a casing rule to an identifier.

    Total over any input: empty strings and runs of underscores never fail.
    Empty snake segments are skipped, so ``user__name`` becomes ``UserName``.
    """
    mode = CasingMode(mode)
    if mode is CasingMode.SNAKE_TO_UPPER_CAMEL:
        return _to_upper_camel(identifier)
    if mode is CasingMode.SNAKE_TO_LOWER_CAMEL:
        return _to_lower_camel(identifier)
    if mode is CasingMode.CAMEL_TO_SNAKE:
        return _to_snake(identifier)
    return identifier
