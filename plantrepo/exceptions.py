"""
Exceptions raised by plantrepo.

All library errors inherit from PlantRepositoryError so callers (e.g. the CLI)
can catch anything raised by the repository with a single except clause.
"""

from __future__ import annotations

from typing import Optional


class PlantRepositoryError(Exception):
    """Base class for all plantrepo exceptions."""


class NetworkError(PlantRepositoryError):
    """
    Raised when the remote plant service cannot deliver a usable response.

    Attributes
    ----------
    cause : Exception | None
        The underlying transport or decoding error, if any.
    """

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        self.cause = cause
        super().__init__(message)


__all__ = ["NetworkError", "PlantRepositoryError"]
