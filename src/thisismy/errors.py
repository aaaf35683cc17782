"""Exceptions raised by thisismy."""

from __future__ import annotations


class ThisismyError(Exception):
    """Base class for thisismy errors."""


class ResolutionError(ThisismyError):
    """Resolution cannot proceed at all, e.g. the working directory is unreadable."""


class FetchError(ThisismyError):
    """Content for a resource could not be fetched."""

    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"Could not fetch {identifier}: {reason}")
        self.identifier: str = identifier
        self.reason: str = reason
