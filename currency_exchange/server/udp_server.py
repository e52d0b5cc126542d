import logging
import socket
import time
from currency_exchange.server.config import MAX_PACKET_SIZE
from currency_exchange.server.protocol import ReplyKind

logger = logging.getLogger('Currency-Exchange')


class UDPServer:
    """
    Currency exchange request loop.

    Receives one request per datagram, tracks the sender in the connection
    registry and answers with the processor's reply. DISCONNECT requests
    remove the sender and get no reply.
    """

    def __init__(self, host, port, registry, processor, connection_log,
                 clock=time.time, poll_interval=1.0):
        self.host = host
        self.port = port
        self.registry = registry
        self.processor = processor
        self.connection_log = connection_log
        self.clock = clock
        self.poll_interval = poll_interval
        self.socket = None
        self.running = False
        self.started_at = None
        self.requests_handled = 0
        self.errors = 0
        self.traffic_bytes_in = 0  # Total incoming bytes
        self.traffic_bytes_out = 0  # Total outgoing bytes

    def start(self):
        """Bind the UDP socket. Raises OSError if the port cannot be bound."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.bind((self.host, self.port))
        except OSError:
            sock.close()
            raise
        # Poll timeout so stop() is noticed; not an exchange timeout
        sock.settimeout(self.poll_interval)
        self.socket = sock
        self.port = sock.getsockname()[1]
        self.running = True
        self.started_at = self.clock()
        logger.info(f"UDP Server listening on {self.host}:{self.port}")

    def serve_forever(self):
        while self.running:
            sock = self.socket
            if sock is None:
                break
            try:
                data, client_address = sock.recvfrom(MAX_PACKET_SIZE)
            except socket.timeout:
                continue
            except OSError as e:
                if self.running:
                    self.errors += 1
                    logger.error(f"Error receiving packet: {e}")
                continue

            self.traffic_bytes_in += len(data)

            try:
                response = self.handle_datagram(data, client_address)
            except Exception:
                self.errors += 1
                logger.exception(f"Error handling request from {client_address}")
                continue

            if response is not None:
                self._send(sock, response, client_address)

    def handle_datagram(self, data, client_address):
        """
        Process one request datagram.

        Returns:
            Reply bytes to send back, or None when nothing should be sent
        """
        now = self.clock()
        reply = self.processor.handle(data)
        logger.debug(f"Received from {client_address[0]}:{client_address[1]}: {data!r}")

        if reply.kind == ReplyKind.DISCONNECT:
            record = self.registry.remove(client_address)
            if record is not None:
                self.connection_log.log_disconnect(record, now=now)
            else:
                logger.debug(f"DISCONNECT from untracked client {client_address}")
            return None

        if self.registry.touch(client_address, now=now):
            record = self.registry.get(client_address)
            if record is not None:
                self.connection_log.log_connect(record, now=now)

        self.requests_handled += 1
        if reply.is_error:
            logger.info(f"⚠️ {client_address[0]}:{client_address[1]} -> {reply.text}")
        else:
            logger.info(f"✅ {client_address[0]}:{client_address[1]} -> {reply.text}")
        return reply.encode()

    def _send(self, sock, data, address):
        try:
            sock.sendto(data, address)
            self.traffic_bytes_out += len(data)
        except OSError as e:
            self.errors += 1
            logger.error(f"Failed to send response to {address}: {e}")

    def get_current_traffic(self):
        return {
            "bytes_in": self.traffic_bytes_in,
            "bytes_out": self.traffic_bytes_out
        }

    def stop(self):
        self.running = False
        if self.socket:
            self.socket.close()
            self.socket = None
        logger.info("UDP Server stopped")
