"""
Watch session: seeds fingerprints, watches local files through watchdog and
polls URLs on a timer, and feeds detected changes to the confirmation gate.

Both watchers only publish `ChangeEvent`s onto one queue. The thread that
calls `run()` is the single consumer, so at most one prompt is ever pending
and later changes wait their turn rather than being dropped.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from queue import Empty, Queue
from typing import IO, Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from thisismy.errors import FetchError
from thisismy.fetch import RawFetcher
from thisismy.resolver.types import ResolvedResource
from thisismy.watch.fingerprint import FingerprintStore, fingerprint
from thisismy.watch.gate import ConfirmationGate, Decision, interpret_response

log = logging.getLogger(__name__)

DEFAULT_INTERVAL_MINUTES = 5

# How often the consumer wakes up to check for an idle exit command.
IDLE_POLL_SECONDS = 0.2

_RELEVANT_EVENT_TYPES = frozenset({"modified", "created", "moved"})


class SessionState(Enum):
    created = "created"
    seeding = "seeding"
    armed = "armed"
    confirming = "confirming"
    terminated = "terminated"


@dataclass(frozen=True)
class ChangeEvent:
    """A resource whose fingerprint changed."""

    identifier: str
    digest: str


class _LocalChangeHandler(FileSystemEventHandler):
    """Maps watchdog events in a watched directory back to watched resources."""

    def __init__(self, on_change: Callable[[str], Any], watched: dict[str, str]) -> None:
        super().__init__()
        self._on_change = on_change
        self._watched = watched  # absolute path -> resource identifier

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _RELEVANT_EVENT_TYPES:
            return
        # Editors often save via rename, so the destination of a move counts too.
        for raw in (event.src_path, getattr(event, "dest_path", "")):
            if not raw:
                continue
            identifier = self._watched.get(os.path.abspath(os.fsdecode(raw)))
            if identifier is not None:
                self._on_change(identifier)


class LineReader:
    """
    Reads operator input on a background thread so the session can tell an
    idle `x` apart from an answer to a prompt. End of input reads as `None`.
    """

    def __init__(self, stream: IO[str]) -> None:
        self._stream = stream
        self._lines: Queue[str | None] = Queue()
        self._eof = False
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._worker, name="thisismy-input", daemon=True)
        self._thread.start()

    def _worker(self) -> None:
        for line in self._stream:
            self._lines.put(line)
        self._lines.put(None)

    def read_line(self) -> str | None:
        """Block for the next line."""
        if self._eof:
            return None
        line = self._lines.get()
        if line is None:
            self._eof = True
        return line

    def poll(self) -> str | None:
        """Next line if one is waiting, else `None`."""
        if self._eof:
            return None
        try:
            line = self._lines.get_nowait()
        except Empty:
            return None
        if line is None:
            self._eof = True
        return line


class WatchSession:
    """
    Watches resolved resources and asks for confirmation whenever one changes.

    `on_rerun` is called on the consumer thread after a `rerun` answer. The
    session ends on an `exit` answer (or an idle exit command) and `run()`
    returns `Decision.exit`; the caller is expected to end the process.
    """

    def __init__(
        self,
        resources: Sequence[ResolvedResource],
        fetcher: RawFetcher,
        gate: ConfirmationGate,
        on_rerun: Callable[[], None],
        interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
        root: Path | None = None,
        observer_factory: Callable[[], Any] | None = None,
    ) -> None:
        self.resources: tuple[ResolvedResource, ...] = tuple(resources)
        self.fetcher: RawFetcher = fetcher
        self.gate: ConfirmationGate = gate
        self.on_rerun: Callable[[], None] = on_rerun
        self.interval_minutes: int = max(1, interval_minutes)
        self.root: Path = root if root is not None else Path.cwd()
        self.store: FingerprintStore = FingerprintStore()
        self.state: SessionState = SessionState.created

        self._observer_factory = observer_factory
        self._observer: Any = None
        self._events: Queue[ChangeEvent] = Queue()
        self._stopped = threading.Event()
        self._timer: threading.Thread | None = None

    @property
    def interval_seconds(self) -> float:
        return self.interval_minutes * 60.0

    @property
    def local_resources(self) -> list[ResolvedResource]:
        return [r for r in self.resources if not r.is_url]

    @property
    def remote_resources(self) -> list[ResolvedResource]:
        return [r for r in self.resources if r.is_url]

    @property
    def pending(self) -> int:
        return self._events.qsize()

    def seed(self) -> None:
        """Record a baseline fingerprint for every resource. Never reports a change."""
        self.state = SessionState.seeding
        for resource in self.resources:
            try:
                content = self.fetcher.fetch_raw(resource.identifier)
            except FetchError as e:
                log.warning("%s", e)
                continue
            self.store.seed(resource.identifier, fingerprint(content))

    def evaluate(self, identifier: str) -> bool:
        """
        Re-fetch one resource and compare fingerprints. A change updates the
        stored fingerprint right away and queues a `ChangeEvent`.
        """
        if self._stopped.is_set():
            return False
        try:
            content = self.fetcher.fetch_raw(identifier)
        except FetchError as e:
            log.warning("%s", e)
            return False
        digest = fingerprint(content)
        if not self.store.observe(identifier, digest):
            return False
        log.debug("Change detected: %s", identifier)
        self._events.put(ChangeEvent(identifier, digest))
        return True

    def poll_remote(self) -> None:
        """Evaluate every URL resource in turn."""
        for resource in self.remote_resources:
            if self._stopped.is_set():
                return
            self.evaluate(resource.identifier)

    def start(self) -> None:
        """Arm local subscriptions and the remote poll timer."""
        if self.state is SessionState.terminated:
            raise RuntimeError("Watch session already terminated")
        if self.state is SessionState.created:
            self.seed()
        self._start_local()
        self._start_remote()
        self.state = SessionState.armed

    def _start_local(self) -> None:
        watched_by_dir: dict[str, dict[str, str]] = {}
        for resource in self.local_resources:
            full = os.path.abspath(self.root / resource.identifier)
            watched_by_dir.setdefault(os.path.dirname(full), {})[full] = resource.identifier
        if not watched_by_dir:
            return

        factory = self._observer_factory or Observer
        self._observer = factory()
        for directory, watched in sorted(watched_by_dir.items()):
            handler = _LocalChangeHandler(self.evaluate, watched)
            try:
                self._observer.schedule(handler, directory, recursive=False)
            except OSError as e:
                log.warning("Could not watch %s: %s", directory, e)
        self._observer.start()
        log.debug("Watching %d director(ies) for local changes", len(watched_by_dir))

    def _start_remote(self) -> None:
        if not self.remote_resources:
            return
        self._timer = threading.Thread(target=self._poll_worker, name="thisismy-remote-poll", daemon=True)
        self._timer.start()
        log.debug("Polling %d URL(s) every %d minute(s)", len(self.remote_resources), self.interval_minutes)

    def _poll_worker(self) -> None:
        while not self._stopped.wait(self.interval_seconds):
            self.poll_remote()

    def next_batch(self, timeout: float | None = None) -> list[str]:
        """
        Wait for the next change, then take any others already queued with it.
        Returns identifiers in detection order without duplicates; empty on timeout.
        """
        try:
            first = self._events.get(timeout=timeout)
        except Empty:
            return []
        batch = [first.identifier]
        while True:
            try:
                event = self._events.get_nowait()
            except Empty:
                break
            if event.identifier not in batch:
                batch.append(event.identifier)
        return batch

    def handle_next(self, timeout: float | None = None) -> Decision | None:
        """Confirm the next batch of changes. Returns `None` if nothing arrived in time."""
        batch = self.next_batch(timeout)
        if not batch:
            return None
        self.state = SessionState.confirming
        decision = self.gate.confirm(batch)
        if decision is Decision.rerun:
            self.on_rerun()
        if decision is Decision.exit:
            self.stop()
        else:
            self.state = SessionState.armed
        return decision

    def run(self, idle_input: Callable[[], str | None] | None = None) -> Decision:
        """
        Consume change events until the operator exits. `idle_input` is polled
        between events; an exit response there ends the session too.
        """
        if self.state is SessionState.created:
            self.start()
        while not self._stopped.is_set():
            decision = self.handle_next(timeout=IDLE_POLL_SECONDS)
            if decision is Decision.exit:
                break
            if idle_input is not None and interpret_response(idle_input()) is Decision.exit:
                log.debug("Exit requested while idle")
                self.stop()
        return Decision.exit

    def stop(self) -> None:
        """Release filesystem subscriptions and cancel the timer. Safe to call twice."""
        if self.state is SessionState.terminated:
            return
        self.state = SessionState.terminated
        self._stopped.set()
        if self._observer is not None:
            self._observer.stop()
            if self._observer.is_alive():
                self._observer.join(timeout=2)
            self._observer = None

    def __enter__(self) -> WatchSession:
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()
