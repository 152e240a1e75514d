import itertools
import threading
import time

import pytest

from catch_server.players import PlayersRegistry, WriteSerializer


class FakeGateway:
    """In-memory column. Deletes are applied one at a time in the order given, like the Sheets batch."""

    _ids = itertools.count()

    def __init__(self, rows=None, read_delay=0.0):
        self.rows = list(rows or [])
        self.store_id = f"fake/{next(self._ids)}"
        self.read_delay = read_delay
        self.appends = []
        self.delete_calls = []
        self._lock = threading.Lock()

    def read_column(self):
        with self._lock:
            snapshot = list(self.rows)
        if self.read_delay:
            time.sleep(self.read_delay)
        return snapshot

    def append_value(self, value):
        with self._lock:
            self.rows.append(value)
            self.appends.append(value)

    def delete_rows(self, row_numbers):
        with self._lock:
            self.delete_calls.append(list(row_numbers))
            for row in row_numbers:
                del self.rows[row - 1]


@pytest.fixture
def make_gateway():
    return FakeGateway


@pytest.fixture
def make_registry():
    def _make(rows=None, read_delay=0.0):
        gateway = FakeGateway(rows, read_delay=read_delay)
        return PlayersRegistry(gateway, serializer=WriteSerializer(name=gateway.store_id, timeout=5))
    return _make
