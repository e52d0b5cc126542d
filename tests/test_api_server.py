"""Tests for the read-only status API."""

import pytest
from fastapi.testclient import TestClient

from currency_exchange.server.api_server import create_app
from currency_exchange.server.udp_server import UDPServer


@pytest.fixture
def udp_server(registry, processor, connection_log, clock):
    return UDPServer("127.0.0.1", 0, registry, processor, connection_log, clock=clock)


@pytest.fixture
def client(udp_server, rate_table):
    return TestClient(create_app(udp_server, rate_table, rate_source="exchange.txt"))


class TestHealth:

    def test_degraded_when_udp_not_running(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["udp_running"] is False
        assert body["rates_loaded"] == 2

    def test_healthy_when_running(self, client, udp_server):
        udp_server.running = True

        body = client.get("/health").json()

        assert body["status"] == "healthy"


class TestConnections:

    def test_lists_active_connections(self, client, udp_server, clock):
        udp_server.handle_datagram(b"usd eur", ("10.0.0.1", 5000))
        clock.advance(30)

        body = client.get("/api/connections").json()

        assert body["count"] == 1
        connection = body["connections"][0]
        assert connection["address"] == "10.0.0.1"
        assert connection["port"] == 5000
        assert connection["idle_seconds"] == 30.0

    def test_disconnected_client_is_gone(self, client, udp_server):
        udp_server.handle_datagram(b"usd eur", ("10.0.0.1", 5000))
        udp_server.handle_datagram(b"DISCONNECT", ("10.0.0.1", 5000))

        assert client.get("/api/connections").json()["count"] == 0


class TestRates:

    def test_lists_pairs_and_source(self, client):
        body = client.get("/api/rates").json()

        assert body["count"] == 2
        assert body["source"] == "exchange.txt"
        rates = {(r["from_currency"], r["to_currency"]): r["rate"] for r in body["rates"]}
        assert rates[("USD", "EUR")] == pytest.approx(0.92)
        assert rates[("EUR", "USD")] == pytest.approx(1 / 0.92)


class TestTraffic:

    def test_counters(self, client, udp_server):
        udp_server.handle_datagram(b"usd eur", ("10.0.0.1", 5000))

        body = client.get("/api/stats/traffic").json()

        assert body["requests_handled"] == 1
        assert body["errors"] == 0
