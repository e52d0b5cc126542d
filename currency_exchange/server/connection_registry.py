import time
from dataclasses import dataclass, replace
from threading import Lock


@dataclass
class ConnectionRecord:
    address: str
    port: int
    connect_time: float
    last_activity_time: float

    @property
    def endpoint(self):
        return (self.address, self.port)

    def duration(self, now):
        return max(0.0, now - self.connect_time)

    def idle_seconds(self, now):
        return max(0.0, now - self.last_activity_time)


class ConnectionRegistry:
    """
    Tracks connected client endpoints and when they were last heard from.

    All access goes through one lock; the receive loop and the activity
    sweeper both mutate the registry. No I/O happens here.
    """

    def __init__(self, clock=time.time):
        self.clients = {}
        self.lock = Lock()
        self.clock = clock

    def touch(self, client_address, now=None):
        """
        Register activity from an endpoint.

        Returns:
            True if the endpoint was not connected before, False otherwise
        """
        if now is None:
            now = self.clock()
        address, port = client_address[0], client_address[1]
        client_key = (address, port)

        with self.lock:
            record = self.clients.get(client_key)
            if record is None:
                self.clients[client_key] = ConnectionRecord(
                    address=address,
                    port=port,
                    connect_time=now,
                    last_activity_time=now
                )
                return True

            record.last_activity_time = max(record.last_activity_time, now)
            return False

    def remove(self, client_address):
        """Remove an endpoint; returns the removed record or None"""
        client_key = (client_address[0], client_address[1])
        with self.lock:
            return self.clients.pop(client_key, None)

    def sweep_expired(self, now, threshold_seconds):
        """Remove and return every record idle for longer than the threshold"""
        with self.lock:
            stale_clients = [
                client_key for client_key, record in self.clients.items()
                if now - record.last_activity_time > threshold_seconds
            ]
            return [self.clients.pop(client_key) for client_key in stale_clients]

    def get(self, client_address):
        client_key = (client_address[0], client_address[1])
        with self.lock:
            record = self.clients.get(client_key)
            return replace(record) if record is not None else None

    def snapshot(self):
        with self.lock:
            return [replace(record) for record in self.clients.values()]

    def __len__(self):
        with self.lock:
            return len(self.clients)

    def __contains__(self, client_address):
        client_key = (client_address[0], client_address[1])
        with self.lock:
            return client_key in self.clients
