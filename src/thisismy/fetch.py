"""
Content fetching for resolved resources.

Local files are read directly. URLs are retrieved with `urllib` and, when the
response is HTML, reduced to the main article text with readability. The
aggregator relies on `fetch()` returning text; the watch session hashes the
undecoded bytes from `fetch_raw()`. Both raise `FetchError` on failure.
"""

from __future__ import annotations

import logging
import re
import urllib.error
import urllib.request
from pathlib import Path
from typing import Protocol

import lxml.html
from lxml import etree
from readability import Document

from thisismy.errors import FetchError
from thisismy.resolver.types import is_url

log = logging.getLogger(__name__)

FETCH_TIMEOUT_SECONDS = 30

FETCH_HEADERS: dict[str, str] = {
    "User-Agent": "Mozilla/5.0",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

_INLINE_SPACE_RE = re.compile(r"[ \t\f\v\r]+")


class Fetcher(Protocol):
    def fetch(self, identifier: str) -> str: ...


class RawFetcher(Protocol):
    def fetch_raw(self, identifier: str) -> bytes | str: ...


def extract_text(html: str) -> str:
    """
    Reduce an HTML document to the readable text of its main content.
    Returns "" if nothing readable is found.
    """
    try:
        summary = Document(html).summary(html_partial=True)
        root = lxml.html.fromstring(summary)
    except (ValueError, etree.ParserError) as e:
        log.debug("Readability could not parse document: %s", e)
        return ""
    lines = (_INLINE_SPACE_RE.sub(" ", chunk).strip() for chunk in root.itertext())
    return "\n".join(line for line in lines if line)


def _looks_like_html(content_type: str, body: str) -> bool:
    if "html" in content_type.lower():
        return True
    head = body.lstrip()[:256].lower()
    return head.startswith("<!doctype html") or head.startswith("<html")


def _decode(raw: bytes, charset: str, url: str) -> str:
    try:
        return raw.decode(charset, errors="replace")
    except LookupError:
        log.debug("Unknown charset %r from %s, decoding as utf-8", charset, url)
        return raw.decode("utf-8", errors="replace")


class ContentFetcher:
    """
    Default fetcher: reads files relative to `root` and retrieves URLs over HTTP(S).
    """

    def __init__(self, root: Path | None = None, timeout: float = FETCH_TIMEOUT_SECONDS) -> None:
        self.root: Path = root if root is not None else Path.cwd()
        self.timeout: float = timeout

    def fetch(self, identifier: str) -> str:
        if is_url(identifier):
            return self.fetch_url(identifier)
        return self.read_file(identifier)

    def fetch_raw(self, identifier: str) -> bytes:
        """Undecoded content: file bytes as stored, or the HTTP response body."""
        if is_url(identifier):
            raw, _content_type, _charset = self._download(identifier)
            return raw
        return self.read_bytes(identifier)

    def read_bytes(self, identifier: str) -> bytes:
        path = self.root / identifier
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise FetchError(identifier, "file not found") from e
        except PermissionError as e:
            raise FetchError(identifier, "permission denied") from e
        except OSError as e:
            raise FetchError(identifier, str(e)) from e

    def read_file(self, identifier: str) -> str:
        return self.read_bytes(identifier).decode("utf-8", errors="replace")

    def _download(self, url: str) -> tuple[bytes, str, str]:
        request = urllib.request.Request(url, headers=FETCH_HEADERS)
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                charset = response.headers.get_content_charset() or "utf-8"
                content_type = response.headers.get("Content-Type", "")
                raw = response.read()
        except (urllib.error.URLError, OSError, ValueError) as e:
            raise FetchError(url, str(e)) from e
        return raw, content_type, charset

    def fetch_url(self, url: str) -> str:
        raw, content_type, charset = self._download(url)
        body = _decode(raw, charset, url)
        if not _looks_like_html(content_type, body):
            return body
        text = extract_text(body)
        if not text:
            log.debug("No readable text extracted from %s; using raw HTML", url)
            return body
        return text
