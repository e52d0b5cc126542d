"""
FastAPI status API for the Currency Exchange Server (read-only)
"""
import logging
import threading
from datetime import datetime
from typing import List, Optional

import uvicorn
from fastapi import FastAPI
from pydantic import BaseModel

logger = logging.getLogger('Currency-Exchange')


class HealthStatus(BaseModel):
    status: str
    udp_running: bool
    rates_loaded: int
    active_connections: int
    uptime_seconds: float
    timestamp: str


class ConnectionInfo(BaseModel):
    address: str
    port: int
    connect_time: str
    last_activity_time: str
    idle_seconds: float


class ConnectionList(BaseModel):
    connections: List[ConnectionInfo]
    count: int


class RateInfo(BaseModel):
    from_currency: str
    to_currency: str
    rate: float


class RateList(BaseModel):
    rates: List[RateInfo]
    count: int
    source: Optional[str] = None


class TrafficInfo(BaseModel):
    requests_handled: int
    errors: int
    bytes_in: int
    bytes_out: int


def _iso(timestamp):
    return datetime.fromtimestamp(timestamp).isoformat(timespec='seconds')


def create_app(udp_server, rate_table, rate_source=None):
    app = FastAPI(
        title="Currency Exchange Server API",
        description="Status of the UDP currency exchange server",
        version="1.0.0"
    )

    @app.get("/health", response_model=HealthStatus)
    async def health_check():
        udp_running = bool(udp_server.running)
        uptime = 0.0
        if udp_server.started_at is not None:
            uptime = round(udp_server.clock() - udp_server.started_at, 1)
        return HealthStatus(
            status="healthy" if udp_running else "degraded",
            udp_running=udp_running,
            rates_loaded=len(rate_table),
            active_connections=len(udp_server.registry),
            uptime_seconds=uptime,
            timestamp=datetime.now().isoformat(timespec='seconds')
        )

    @app.get("/api/connections", response_model=ConnectionList)
    async def get_connections():
        """Currently connected clients"""
        now = udp_server.clock()
        records = sorted(udp_server.registry.snapshot(), key=lambda r: r.connect_time)
        connections = [
            ConnectionInfo(
                address=record.address,
                port=record.port,
                connect_time=_iso(record.connect_time),
                last_activity_time=_iso(record.last_activity_time),
                idle_seconds=round(record.idle_seconds(now), 2)
            )
            for record in records
        ]
        return ConnectionList(connections=connections, count=len(connections))

    @app.get("/api/rates", response_model=RateList)
    async def get_rates():
        rates = [
            RateInfo(from_currency=from_currency, to_currency=to_currency, rate=rate)
            for (from_currency, to_currency), rate in rate_table.pairs()
        ]
        return RateList(rates=rates, count=len(rates), source=rate_source)

    @app.get("/api/stats/traffic", response_model=TrafficInfo)
    async def get_traffic_stats():
        traffic = udp_server.get_current_traffic()
        return TrafficInfo(
            requests_handled=udp_server.requests_handled,
            errors=udp_server.errors,
            bytes_in=traffic["bytes_in"],
            bytes_out=traffic["bytes_out"]
        )

    return app


def start_api_server(app, host="0.0.0.0", port=8000):
    """Run the API in a daemon thread; returns the thread"""
    config = uvicorn.Config(app, host=host, port=port, log_level="warning")
    server = uvicorn.Server(config)

    def run():
        try:
            server.run()
        except Exception:
            logger.exception("Status API stopped with an error")

    api_thread = threading.Thread(target=run, name='status-api', daemon=True)
    api_thread.start()
    logger.info(f"✅ Status API running on http://{host}:{port}")
    return api_thread
