import os
from dataclasses import dataclass
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class ConfigError(Exception):
    """Invalid server configuration (fatal at startup)"""


def _env_bool(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def to_int(name, value):
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}")


def validate_port(port, name='port'):
    if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
        raise ConfigError(f"Invalid {name}: {port!r} (expected 1-65535)")
    return port


def validate_positive(value, name):
    if value <= 0:
        raise ConfigError(f"{name} must be greater than 0, got {value!r}")
    return value


# Raw values; converted and checked by load() at startup
SERVER_HOST = os.getenv('SERVER_HOST', '0.0.0.0')
SERVER_PORT = os.getenv('SERVER_PORT', 8888)
MAX_PACKET_SIZE = 1024

# Inactivity tracking
SWEEP_INTERVAL_SECONDS = os.getenv('SWEEP_INTERVAL_SECONDS', 60)
INACTIVITY_TIMEOUT_SECONDS = os.getenv('INACTIVITY_TIMEOUT_SECONDS', 300)

# Rate source: each row is "<label>,<rate>,..." giving 1 BASE = rate QUOTE
BASE_CURRENCY = os.getenv('BASE_CURRENCY', 'USD').upper()
QUOTE_CURRENCY = os.getenv('QUOTE_CURRENCY', 'EUR').upper()
RATE_FILE_CANDIDATES = [
    os.getenv('RATE_FILE', 'exchange.txt'),
    os.path.join('..', 'exchange.txt'),
    os.path.join('..', '..', 'exchange.txt'),
]

# Log files
CONNECTION_LOG_FILE = os.getenv('CONNECTION_LOG_FILE', 'server_log.txt')
LOG_FILE = os.getenv('LOG_FILE', 'currency-exchange-server.log')

# Status API
API_ENABLED = _env_bool('API_ENABLED', True)
API_HOST = os.getenv('API_HOST', '0.0.0.0')
API_PORT = os.getenv('API_PORT', 8000)


@dataclass(frozen=True)
class ServerSettings:
    server_port: int
    api_port: int
    sweep_interval: int
    inactivity_timeout: int


def load():
    """
    Convert and validate the numeric settings.

    Raises:
        ConfigError on a non-integer or out-of-range value
    """
    api_port = None
    if API_ENABLED:
        api_port = validate_port(to_int('API_PORT', API_PORT), 'API_PORT')
    return ServerSettings(
        server_port=validate_port(to_int('SERVER_PORT', SERVER_PORT), 'SERVER_PORT'),
        api_port=api_port,
        sweep_interval=validate_positive(
            to_int('SWEEP_INTERVAL_SECONDS', SWEEP_INTERVAL_SECONDS), 'SWEEP_INTERVAL_SECONDS'
        ),
        inactivity_timeout=validate_positive(
            to_int('INACTIVITY_TIMEOUT_SECONDS', INACTIVITY_TIMEOUT_SECONDS),
            'INACTIVITY_TIMEOUT_SECONDS'
        ),
    )
