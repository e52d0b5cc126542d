import logging
import socket
from currency_exchange.client.config import MAX_PACKET_SIZE, RESPONSE_TIMEOUT_SECONDS
from currency_exchange.server.protocol import ENCODING, build_disconnect, build_request

logger = logging.getLogger('Currency-Exchange')


class ExchangeClient:
    """Sends rate requests to the exchange server over UDP"""

    def __init__(self, server_ip, server_port, timeout=RESPONSE_TIMEOUT_SECONDS):
        self.server_ip = server_ip
        self.server_port = server_port
        self.timeout = timeout
        self.socket = None

    def connect(self):
        # Keep one local port so the server sees a single endpoint
        if self.socket is None:
            self.socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            self.socket.settimeout(self.timeout)

    def request_rate(self, from_currency, to_currency):
        """
        Ask the server for a conversion rate.

        Returns:
            The server's reply text ("1 USD = ... EUR" or "ERROR: ...")

        Raises:
            socket.timeout if no reply arrives in time, OSError on socket errors
        """
        self.connect()
        request = build_request(from_currency, to_currency)
        self.socket.sendto(request, (self.server_ip, self.server_port))
        logger.debug(f"Sent request {request!r} to {self.server_ip}:{self.server_port}")

        while True:
            data, address = self.socket.recvfrom(MAX_PACKET_SIZE)
            if address[1] == self.server_port:
                return data.decode(ENCODING, errors='replace')
            logger.debug(f"Ignoring datagram from unexpected sender {address}")

    def disconnect(self):
        """Tell the server we are done and close the socket"""
        if self.socket is None:
            return
        try:
            self.socket.sendto(build_disconnect(), (self.server_ip, self.server_port))
        except OSError as e:
            logger.warning(f"Failed to send DISCONNECT: {e}")
        finally:
            self.socket.close()
            self.socket = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.disconnect()
