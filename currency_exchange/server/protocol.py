from dataclasses import dataclass
from enum import Enum

DISCONNECT_MESSAGE = 'DISCONNECT'
ENCODING = 'utf-8'

INVALID_FORMAT_ERROR = 'ERROR: Invalid request format. Expected: CURRENCY1 CURRENCY2'
NOT_FOUND_ERROR = 'ERROR: Exchange rate not found for {from_currency} to {to_currency}'


class ReplyKind(Enum):
    RATE = 'rate'
    NOT_FOUND = 'not_found'
    INVALID_FORMAT = 'invalid_format'
    DISCONNECT = 'disconnect'


@dataclass(frozen=True)
class Reply:
    kind: ReplyKind
    text: str = None

    @property
    def is_error(self):
        return self.kind in (ReplyKind.NOT_FOUND, ReplyKind.INVALID_FORMAT)

    def encode(self):
        if self.text is None:
            return None
        return self.text.encode(ENCODING)


def decode_request(data):
    """Decode a request datagram into normalized (trimmed, upper-case) text"""
    return data.decode(ENCODING, errors='replace').strip().upper()


def format_rate(from_currency, to_currency, rate):
    return f"1 {from_currency} = {rate:.6f} {to_currency}"


def build_request(from_currency, to_currency):
    return f"{from_currency} {to_currency}".encode(ENCODING)


def build_disconnect():
    return DISCONNECT_MESSAGE.encode(ENCODING)


class RequestProcessor:
    """Maps raw request datagrams to replies using a RateTable"""

    def __init__(self, rate_table):
        self.rate_table = rate_table

    def handle(self, data):
        request = decode_request(data)

        if request == DISCONNECT_MESSAGE:
            return Reply(ReplyKind.DISCONNECT)

        tokens = request.split()
        if len(tokens) != 2:
            return Reply(ReplyKind.INVALID_FORMAT, INVALID_FORMAT_ERROR)

        from_currency, to_currency = tokens
        rate = self.rate_table.lookup(from_currency, to_currency)
        if rate is None:
            return Reply(
                ReplyKind.NOT_FOUND,
                NOT_FOUND_ERROR.format(from_currency=from_currency, to_currency=to_currency)
            )

        return Reply(ReplyKind.RATE, format_rate(from_currency, to_currency, rate))
