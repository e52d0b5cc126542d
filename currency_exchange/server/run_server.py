"""
Currency Exchange Server: UDP request loop, inactivity sweeper and status API
"""
import signal
import sys
import threading
from currency_exchange.server import config
from currency_exchange.server.activity_sweeper import ActivitySweeper
from currency_exchange.server.connection_log import ConnectionLog
from currency_exchange.server.connection_registry import ConnectionRegistry
from currency_exchange.server.logger import setup_logger
from currency_exchange.server.protocol import RequestProcessor
from currency_exchange.server.rate_table import RateTable, find_rate_file
from currency_exchange.server.udp_server import UDPServer


def load_rates(logger, candidates=None, base=None, quote=None):
    candidates = candidates or config.RATE_FILE_CANDIDATES
    base = base or config.BASE_CURRENCY
    quote = quote or config.QUOTE_CURRENCY

    path = find_rate_file(candidates)
    if path is None:
        logger.error(f"ERROR: exchange rate file not found (tried: {', '.join(candidates)})")
        logger.warning("Serving with an empty rate table, every lookup will fail")
        return RateTable(), None

    rate_table, report = RateTable.from_file(path, base, quote)
    logger.info(
        f"Loaded rates from {path}: {report.rows_loaded} rows used, "
        f"{report.rows_skipped} skipped"
    )
    if len(rate_table) == 0:
        logger.warning("No valid exchange rates loaded, every lookup will fail")
    for (from_currency, to_currency), rate in rate_table.pairs():
        logger.info(f"  {from_currency} to {to_currency}: {rate}")
    return rate_table, report.source


def build_server(rate_table, host, port, connection_log_file,
                 sweep_interval=60, inactivity_timeout=300):
    """Wire registry, processor, connection log, UDP server and sweeper"""
    registry = ConnectionRegistry()
    connection_log = ConnectionLog(connection_log_file)
    server = UDPServer(host, port, registry, RequestProcessor(rate_table), connection_log)
    sweeper = ActivitySweeper(
        registry,
        connection_log,
        interval_seconds=sweep_interval,
        timeout_seconds=inactivity_timeout
    )
    return server, sweeper, connection_log


def main():
    logger = setup_logger(config.LOG_FILE)

    try:
        settings = config.load()
    except config.ConfigError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    rate_table, rate_source = load_rates(logger)
    server, sweeper, connection_log = build_server(
        rate_table, config.SERVER_HOST, settings.server_port, config.CONNECTION_LOG_FILE,
        sweep_interval=settings.sweep_interval,
        inactivity_timeout=settings.inactivity_timeout
    )

    try:
        server.start()
    except OSError as e:
        logger.error(f"Error starting server on port {settings.server_port}: {e}")
        sys.exit(1)

    connection_log.start()
    sweeper.start()

    receive_thread = threading.Thread(target=server.serve_forever, name='udp-receive', daemon=True)
    receive_thread.start()

    if config.API_ENABLED:
        from currency_exchange.server.api_server import create_app, start_api_server
        start_api_server(
            create_app(server, rate_table, rate_source),
            host=config.API_HOST,
            port=settings.api_port
        )

    stop_event = threading.Event()
    signal.signal(signal.SIGTERM, lambda signum, frame: stop_event.set())

    logger.info("Server is running. Press Ctrl+C to stop.")

    try:
        while not stop_event.is_set() and receive_thread.is_alive():
            stop_event.wait(1)
    except KeyboardInterrupt:
        pass

    logger.info("Shutting down server...")
    sweeper.stop()
    server.stop()
    receive_thread.join(timeout=5)
    connection_log.stop()
    logger.info("Server stopped.")


if __name__ == '__main__':
    main()
