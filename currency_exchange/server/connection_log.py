import logging
import queue
import socket
import threading
import time
from datetime import datetime

logger = logging.getLogger('Currency-Exchange')

UNKNOWN_HOST = 'Unknown'
TIME_FORMAT = '%Y-%m-%d %H:%M:%S'


def resolve_host(address):
    """Reverse-DNS lookup; returns 'Unknown' when it fails"""
    try:
        return socket.gethostbyaddr(address)[0]
    except (OSError, UnicodeError, ValueError):
        return UNKNOWN_HOST


def _fmt(timestamp):
    return datetime.fromtimestamp(timestamp).strftime(TIME_FORMAT)


def format_connect_entry(record, host, now):
    return (
        f"[{_fmt(now)}] Connection established\n"
        f"  IP Address: {record.address}\n"
        f"  Port: {record.port}\n"
        f"  DNS Name: {host}\n"
        f"  Connect Time: {_fmt(record.connect_time)}\n"
        f"  ----------------------------------------\n\n"
    )


def format_disconnect_entry(record, host, now):
    return (
        f"[{_fmt(now)}] Connection closed\n"
        f"  IP Address: {record.address}\n"
        f"  Port: {record.port}\n"
        f"  DNS Name: {host}\n"
        f"  Connect Time: {_fmt(record.connect_time)}\n"
        f"  Disconnect Time: {_fmt(now)}\n"
        f"  Duration: {record.duration(now):.2f} seconds\n\n"
    )


class ConnectionLog:
    """
    Append-only text log of connect and disconnect events.

    Entries are queued and written by a background thread, which also does
    the reverse-DNS lookup, so callers on the receive path never block on
    name resolution or disk I/O.
    """

    def __init__(self, path, resolver=resolve_host, clock=time.time):
        self.path = path
        self.resolver = resolver
        self.clock = clock
        self._queue = queue.Queue()
        self._thread = None
        self.entries_written = 0

    def start(self):
        if self._thread is not None and self._thread.is_alive():
            return
        self._thread = threading.Thread(
            target=self._writer_loop, name='connection-log', daemon=True
        )
        self._thread.start()

    def log_connect(self, record, now=None):
        self._queue.put((format_connect_entry, record, self._now(now)))
        logger.info(f"🔌 New client connected: {record.address}:{record.port}")

    def log_disconnect(self, record, now=None, reason='disconnect'):
        self._queue.put((format_disconnect_entry, record, self._now(now)))
        logger.info(f"👋 Client disconnected ({reason}): {record.address}:{record.port}")

    def _now(self, now):
        return self.clock() if now is None else now

    def _writer_loop(self):
        while True:
            item = self._queue.get()
            try:
                if item is None:
                    return
                self._write(*item)
            finally:
                self._queue.task_done()

    def _write(self, formatter, record, now):
        try:
            host = self.resolver(record.address) or UNKNOWN_HOST
        except Exception as e:
            logger.debug(f"Host lookup for {record.address} failed: {e}")
            host = UNKNOWN_HOST
        entry = formatter(record, host, now)
        try:
            with open(self.path, 'a', encoding='utf-8') as f:
                f.write(entry)
            self.entries_written += 1
        except OSError as e:
            logger.error(f"Error writing connection log {self.path}: {e}")

    def flush(self):
        """Block until every queued entry has been written"""
        if self._thread is None or not self._thread.is_alive():
            # No writer running: drain synchronously
            while True:
                try:
                    item = self._queue.get_nowait()
                except queue.Empty:
                    return
                try:
                    if item is not None:
                        self._write(*item)
                finally:
                    self._queue.task_done()
        self._queue.join()

    def stop(self, timeout=5.0):
        if self._thread is None:
            self.flush()
            return
        self._queue.put(None)
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            # Writer is stuck (e.g. slow DNS); it still owns the queue
            logger.warning(
                f"Connection log writer did not finish within {timeout}s, "
                f"{self._queue.qsize()} entries still pending"
            )
            return
        self._thread = None
        self.flush()

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()
