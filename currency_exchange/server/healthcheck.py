#!/usr/bin/env python3
"""
Healthcheck script for Docker container
Checks the status API and sends a probe request to the UDP server
"""
import socket
import sys
import urllib.request

from currency_exchange.server import config
from currency_exchange.server.protocol import ENCODING, build_disconnect, build_request


def check_api_server(host='localhost', port=8000, timeout=5):
    """Check if API server is responding"""
    try:
        response = urllib.request.urlopen(f'http://{host}:{port}/health', timeout=timeout)
        return response.status == 200
    except Exception as e:
        print(f"API check failed: {e}")
        return False


def check_udp_server(host='127.0.0.1', port=8888, timeout=2.0, pair=('USD', 'EUR')):
    """Send one rate request; any reply (rate or ERROR) means the loop is serving"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.settimeout(timeout)
    try:
        sock.sendto(build_request(*pair), (host, port))
        data, _ = sock.recvfrom(1024)
        reply = data.decode(ENCODING, errors='replace')
        # Leave no registry entry behind for the probe
        sock.sendto(build_disconnect(), (host, port))
        return reply.startswith('1 ') or reply.startswith('ERROR')
    except OSError as e:
        print(f"UDP check failed: {e}")
        return False
    finally:
        sock.close()


def main():
    try:
        settings = config.load()
    except config.ConfigError as e:
        print(f"❌ Health check failed: configuration error: {e}")
        sys.exit(1)

    udp_ok = check_udp_server(port=settings.server_port)
    api_ok = check_api_server(port=settings.api_port) if config.API_ENABLED else True

    if api_ok and udp_ok:
        print("✅ Health check passed")
        sys.exit(0)
    else:
        print("❌ Health check failed")
        print(f"  API Server: {'OK' if api_ok else 'FAIL'}")
        print(f"  UDP Server: {'OK' if udp_ok else 'FAIL'}")
        sys.exit(1)


if __name__ == "__main__":
    main()
