"""Tests for the UDP request loop."""

import socket
import threading
import time

import pytest

from currency_exchange.server.udp_server import UDPServer

CLIENT = ("127.0.0.1", 40001)


@pytest.fixture
def server(registry, processor, connection_log, clock):
    return UDPServer("127.0.0.1", 0, registry, processor, connection_log, clock=clock)


class TestHandleDatagram:
    """Request handling without a socket."""

    def test_rate_request_registers_client_and_replies(self, server, registry, connection_log):
        response = server.handle_datagram(b"usd eur", CLIENT)

        assert response == b"1 USD = 0.920000 EUR"
        assert CLIENT in registry
        assert len(connection_log.connects) == 1
        assert connection_log.connects[0][0].endpoint == CLIENT

    def test_second_request_updates_activity_without_new_connect(self, server, registry, connection_log, clock):
        server.handle_datagram(b"usd eur", CLIENT)
        clock.advance(30)
        server.handle_datagram(b"eur usd", CLIENT)

        assert len(registry) == 1
        assert registry.get(CLIENT).last_activity_time == clock.now
        assert len(connection_log.connects) == 1
        assert server.requests_handled == 2

    def test_error_reply_keeps_client_connected(self, server, registry):
        response = server.handle_datagram(b"usd", CLIENT)

        assert response == b"ERROR: Invalid request format. Expected: CURRENCY1 CURRENCY2"
        assert CLIENT in registry

    def test_disconnect_removes_client_without_reply(self, server, registry, connection_log, clock):
        server.handle_datagram(b"usd eur", CLIENT)
        clock.advance(12)

        response = server.handle_datagram(b"disconnect", CLIENT)

        assert response is None
        assert CLIENT not in registry
        record, now, reason = connection_log.disconnects[0]
        assert record.endpoint == CLIENT
        assert now == clock.now

    def test_disconnect_from_untracked_client_is_noop(self, server, registry, connection_log):
        response = server.handle_datagram(b"DISCONNECT", CLIENT)

        assert response is None
        assert len(registry) == 0
        assert connection_log.connects == []
        assert connection_log.disconnects == []


class TestServeForever:
    """End-to-end over a loopback socket."""

    @pytest.fixture
    def running_server(self, server):
        server.poll_interval = 0.05
        server.start()
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        yield server
        server.stop()
        thread.join(timeout=5)
        assert not thread.is_alive()

    @pytest.fixture
    def client_socket(self):
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.settimeout(5)
        yield sock
        sock.close()

    def test_request_and_reply(self, running_server, client_socket):
        client_socket.sendto(b"usd eur", ("127.0.0.1", running_server.port))

        data, address = client_socket.recvfrom(1024)

        assert data == b"1 USD = 0.920000 EUR"
        assert address[1] == running_server.port

    def test_disconnect_gets_no_reply_and_loop_continues(self, running_server, client_socket, registry):
        target = ("127.0.0.1", running_server.port)
        client_socket.sendto(b"usd eur", target)
        client_socket.recvfrom(1024)
        assert len(registry) == 1

        client_socket.sendto(b"DISCONNECT", target)
        client_socket.sendto(b"usd gbp", target)
        data, _ = client_socket.recvfrom(1024)

        # The only reply is the one for the rate request
        assert data == b"ERROR: Exchange rate not found for USD to GBP"
        assert len(registry) == 1

    def test_handler_failure_does_not_stop_loop(self, running_server, client_socket, monkeypatch):
        original = running_server.processor.handle
        calls = []

        def flaky(data):
            calls.append(data)
            if len(calls) == 1:
                raise RuntimeError("boom")
            return original(data)

        monkeypatch.setattr(running_server.processor, "handle", flaky)
        target = ("127.0.0.1", running_server.port)

        client_socket.sendto(b"usd eur", target)
        client_socket.sendto(b"eur usd", target)
        data, _ = client_socket.recvfrom(1024)

        assert data == b"1 EUR = 1.086957 USD"
        assert running_server.errors == 1

    def test_traffic_is_counted(self, running_server, client_socket):
        client_socket.sendto(b"usd eur", ("127.0.0.1", running_server.port))
        client_socket.recvfrom(1024)

        # bytes_out is updated right after sendto returns
        deadline = time.monotonic() + 5
        while running_server.traffic_bytes_out == 0 and time.monotonic() < deadline:
            time.sleep(0.01)

        traffic = running_server.get_current_traffic()
        assert traffic["bytes_in"] == len(b"usd eur")
        assert traffic["bytes_out"] == len(b"1 USD = 0.920000 EUR")


class TestStart:

    def test_bind_failure_raises(self, registry, processor, connection_log):
        blocker = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        blocker.bind(("127.0.0.1", 0))
        port = blocker.getsockname()[1]
        try:
            server = UDPServer("127.0.0.1", port, registry, processor, connection_log)
            with pytest.raises(OSError):
                server.start()
            assert not server.running
        finally:
            blocker.close()
