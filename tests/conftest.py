"""
Pytest configuration and fixtures for the currency exchange server tests
"""

import pytest

from currency_exchange.server.connection_registry import ConnectionRegistry
from currency_exchange.server.protocol import RequestProcessor
from currency_exchange.server.rate_table import RateTable


class FakeClock:
    """Manually advanced clock"""

    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds
        return self.now


class RecordingConnectionLog:
    """Collects connect/disconnect events instead of writing a file"""

    def __init__(self):
        self.connects = []
        self.disconnects = []

    def log_connect(self, record, now=None):
        self.connects.append((record, now))

    def log_disconnect(self, record, now=None, reason='disconnect'):
        self.disconnects.append((record, now, reason))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_table():
    """Table loaded from the single row USD,0.92"""
    return RateTable.from_rows([["Date", "USD_EUR"], ["USD", "0.92"]], "USD", "EUR")


@pytest.fixture
def processor(rate_table):
    return RequestProcessor(rate_table)


@pytest.fixture
def registry(clock):
    return ConnectionRegistry(clock=clock)


@pytest.fixture
def connection_log():
    return RecordingConnectionLog()
