"""
Content fingerprints for change detection.

Fingerprints are SHA-256 digests of the raw fetched content. Nothing is
normalized before hashing: a trailing space is a change.
"""

from __future__ import annotations

import hashlib
import threading


def fingerprint(content: bytes | str) -> str:
    """Hex SHA-256 digest of `content`. Text is hashed as UTF-8."""
    if isinstance(content, str):
        content = content.encode("utf-8", errors="surrogateescape")
    return hashlib.sha256(content).hexdigest()


def has_changed(new_digest: str, prior_digest: str | None) -> bool:
    """A first observation (no prior digest) is never a change."""
    if prior_digest is None:
        return False
    return new_digest != prior_digest


class FingerprintStore:
    """
    Last-known digest per resource identifier, safe to use from the watchdog
    observer thread and the remote poll thread at the same time.
    """

    def __init__(self) -> None:
        self._digests: dict[str, str] = {}
        self._lock: threading.Lock = threading.Lock()

    def get(self, identifier: str) -> str | None:
        with self._lock:
            return self._digests.get(identifier)

    def seed(self, identifier: str, digest: str) -> None:
        with self._lock:
            self._digests[identifier] = digest

    def observe(self, identifier: str, digest: str) -> bool:
        """
        Record a fresh digest and report whether it is a change.

        The stored value is updated only on a change or on first observation,
        never on an unchanged poll.
        """
        with self._lock:
            prior = self._digests.get(identifier)
            if prior is None:
                self._digests[identifier] = digest
                return False
            if not has_changed(digest, prior):
                return False
            self._digests[identifier] = digest
            return True

    def __contains__(self, identifier: object) -> bool:
        with self._lock:
            return identifier in self._digests

    def __len__(self) -> int:
        with self._lock:
            return len(self._digests)
