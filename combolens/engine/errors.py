"""Exceptions raised by the combination engine."""

from __future__ import annotations


class ComboLensError(Exception):
    """Base class for engine errors."""


class InvalidInputError(ComboLensError, ValueError):
    """Input that can never produce an analysis (empty fields, bad options)."""

    code = "invalid_input"
