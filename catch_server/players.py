"""
Receiver players list, backed by one column of a Google Sheet.

Reads are always fresh from the sheet. Writes (add / delete) run one at a
time per sheet+tab through a WriteSerializer, because "read the list, then
append if absent" is not atomic on the Sheets side.
"""

import logging
import re
import threading
from collections import deque
from dataclasses import dataclass, field

from catch_server.errors import BackingStoreError, InvalidInputError

log = logging.getLogger("catch-server.players")

HEADER_SENTINEL = "name"

_WHITESPACE = re.compile(r"\s+")


# ═══════════════════════════════════════
# NAME NORMALIZATION
# ═══════════════════════════════════════

def canonicalize(raw):
    """Trim and collapse internal whitespace. None / blank → ''."""
    if raw is None:
        return ""
    return _WHITESPACE.sub(" ", str(raw)).strip()


def compare_key(raw):
    return canonicalize(raw).lower()


def is_header_sentinel(raw):
    return compare_key(raw) == HEADER_SENTINEL


def dedupe_players(cells):
    """Raw column cells → ordered player list (no header, no blanks, unique keys, first seen wins)."""
    players = []
    seen = set()
    for cell in cells:
        name = canonicalize(cell)
        if not name or is_header_sentinel(name):
            continue
        key = compare_key(name)
        if key in seen:
            continue
        seen.add(key)
        players.append(name)
    return players


# ═══════════════════════════════════════
# WRITE SERIALIZER
# ═══════════════════════════════════════

class WriteSerializer:
    """FIFO mutex for one backing sheet. Use as a context manager.

    The current holder sits at the head of the queue; waiters are woken in
    arrival order. A waiter that times out leaves the queue and raises
    BackingStoreError.
    """

    def __init__(self, name="", timeout=None):
        self.name = name
        self.timeout = timeout
        self._cond = threading.Condition()
        self._queue = deque()

    def acquire(self, timeout=None):
        ticket = object()
        with self._cond:
            self._queue.append(ticket)
            acquired = self._cond.wait_for(lambda: self._queue[0] is ticket, timeout)
            if not acquired:
                self._queue.remove(ticket)
                self._cond.notify_all()
                raise BackingStoreError(
                    "Players sheet is busy",
                    details=f"Timed out after {timeout}s waiting for write lock on {self.name}",
                )

    def release(self):
        with self._cond:
            self._queue.popleft()
            self._cond.notify_all()

    @property
    def pending(self):
        """Holder + waiters currently queued."""
        with self._cond:
            return len(self._queue)

    def __enter__(self):
        self.acquire(self.timeout)
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False


_serializers = {}
_serializers_lock = threading.Lock()


def serializer_for(store_id, timeout=None):
    """Shared serializer for one sheet+tab identity (created on first use)."""
    with _serializers_lock:
        serializer = _serializers.get(store_id)
        if serializer is None:
            serializer = WriteSerializer(name=store_id, timeout=timeout)
            _serializers[store_id] = serializer
        return serializer


# ═══════════════════════════════════════
# REGISTRY
# ═══════════════════════════════════════

@dataclass
class AddResult:
    added: bool
    players: list = field(default_factory=list)


@dataclass
class DeleteResult:
    deleted_count: int
    players: list = field(default_factory=list)


def _require_name(raw_name):
    name = canonicalize(raw_name)
    if not name:
        raise InvalidInputError("Missing name")
    return name


class PlayersRegistry:
    """Players list over a sheet gateway (read_column / append_value / delete_rows)."""

    def __init__(self, gateway, serializer=None):
        self.gateway = gateway
        self.serializer = serializer or serializer_for(gateway.store_id)

    def list_all(self):
        return dedupe_players(self.gateway.read_column())

    def add(self, raw_name):
        name = _require_name(raw_name)
        if is_header_sentinel(name):
            raise InvalidInputError(f'"{name}" is reserved for the header row')
        key = compare_key(name)

        with self.serializer:
            players = self.list_all()
            if any(compare_key(p) == key for p in players):
                log.info(f"Player already listed, skipping append: {name}")
                return AddResult(added=False, players=players)

            self.gateway.append_value(name)
            players = self.list_all()

        if not any(compare_key(p) == key for p in players):
            raise BackingStoreError("Failed to add player", details=f"{name} missing after append")
        log.info(f"Added player {name} ({len(players)} total)")
        return AddResult(added=True, players=players)

    def delete_all_matching(self, raw_name):
        key = compare_key(_require_name(raw_name))

        with self.serializer:
            # Row numbers come from this read only; the layout may have shifted since any earlier call
            cells = self.gateway.read_column()
            row_numbers = [
                row for row, cell in enumerate(cells, start=1)
                if compare_key(cell) == key and not is_header_sentinel(cell)
            ]
            if row_numbers:
                self.gateway.delete_rows(sorted(row_numbers, reverse=True))
            players = self.list_all()

        if not row_numbers:
            return DeleteResult(deleted_count=0, players=players)
        if any(compare_key(p) == key for p in players):
            raise BackingStoreError("Failed to delete player", details=f"{raw_name!r} still listed after delete")
        log.info(f"Deleted {len(row_numbers)} row(s) matching {raw_name!r} ({len(players)} left)")
        return DeleteResult(deleted_count=len(row_numbers), players=players)
