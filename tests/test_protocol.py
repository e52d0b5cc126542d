"""Tests for request parsing and reply formatting."""

import pytest

from currency_exchange.server.protocol import (
    INVALID_FORMAT_ERROR,
    Reply,
    ReplyKind,
    RequestProcessor,
    build_disconnect,
    build_request,
    decode_request,
)
from currency_exchange.server.rate_table import RateTable


class TestRequestProcessor:
    """RequestProcessor.handle()"""

    def test_rate_request(self, processor):
        reply = processor.handle(b"usd eur")

        assert reply.kind == ReplyKind.RATE
        assert reply.text == "1 USD = 0.920000 EUR"
        assert not reply.is_error

    def test_reciprocal_rate_request(self, processor):
        reply = processor.handle(b"eur usd")

        assert reply.text == "1 EUR = 1.086957 USD"

    def test_whitespace_is_trimmed_and_collapsed(self, processor):
        reply = processor.handle(b"  \tusd \t  eur\r\n")

        assert reply.text == "1 USD = 0.920000 EUR"

    @pytest.mark.parametrize("request_bytes", [
        b"usd",
        b"",
        b"   ",
        b"usd eur gbp",
        b"1 USD = 0.92 EUR",
    ])
    def test_wrong_token_count_is_invalid_format(self, processor, request_bytes):
        reply = processor.handle(request_bytes)

        assert reply.kind == ReplyKind.INVALID_FORMAT
        assert reply.text == "ERROR: Invalid request format. Expected: CURRENCY1 CURRENCY2"
        assert reply.is_error

    def test_unknown_pair_is_not_found(self, processor):
        reply = processor.handle(b"usd gbp")

        assert reply.kind == ReplyKind.NOT_FOUND
        assert reply.text == "ERROR: Exchange rate not found for USD to GBP"

    def test_any_two_tokens_are_looked_up_verbatim(self, processor):
        reply = processor.handle(b"x1 @@")

        assert reply.text == "ERROR: Exchange rate not found for X1 to @@"

    @pytest.mark.parametrize("request_bytes", [b"DISCONNECT", b"disconnect", b"  Disconnect \n"])
    def test_disconnect_has_no_reply_text(self, processor, request_bytes):
        reply = processor.handle(request_bytes)

        assert reply.kind == ReplyKind.DISCONNECT
        assert reply.text is None
        assert reply.encode() is None

    def test_disconnect_with_extra_tokens_is_invalid_format(self, processor):
        reply = processor.handle(b"DISCONNECT NOW NOW")

        assert reply.text == INVALID_FORMAT_ERROR

    def test_invalid_utf8_is_replaced_not_raised(self, processor):
        reply = processor.handle(b"usd \xff\xfe")

        assert reply.kind == ReplyKind.NOT_FOUND

    def test_empty_rate_table_answers_not_found(self):
        processor = RequestProcessor(RateTable())

        assert processor.handle(b"USD EUR").kind == ReplyKind.NOT_FOUND


class TestWireHelpers:

    def test_decode_request_normalizes(self):
        assert decode_request(b"  usd eur \n") == "USD EUR"

    def test_build_request_and_disconnect(self):
        assert build_request("USD", "EUR") == b"USD EUR"
        assert build_disconnect() == b"DISCONNECT"

    def test_reply_encode_is_utf8(self):
        assert Reply(ReplyKind.RATE, "1 USD = 0.920000 EUR").encode() == b"1 USD = 0.920000 EUR"
