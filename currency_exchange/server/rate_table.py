import csv
import logging
import math
import os
from dataclasses import dataclass

logger = logging.getLogger('Currency-Exchange')


@dataclass
class LoadReport:
    """Outcome of loading a rate source"""
    source: str = None
    rows_seen: int = 0
    rows_loaded: int = 0
    rows_skipped: int = 0


def _parse_rate(row):
    if len(row) < 2:
        return None
    try:
        rate = float(row[1].strip())
    except ValueError:
        return None
    if not math.isfinite(rate) or rate <= 0:
        return None
    return rate


def find_rate_file(candidates):
    """Return the first candidate path that exists, or None"""
    for path in candidates:
        if path and os.path.isfile(path):
            return path
    return None


class RateTable:
    """
    Read-only mapping of (from, to) currency pairs to conversion rates.

    Every pair is stored together with its reciprocal. Keys are upper-cased
    on the way in and on lookup.
    """

    def __init__(self, rates=None):
        self._rates = {}
        for (from_currency, to_currency), rate in (rates or {}).items():
            self._store(from_currency, to_currency, rate)

    def _store(self, from_currency, to_currency, rate):
        from_currency = from_currency.strip().upper()
        to_currency = to_currency.strip().upper()
        self._rates[(from_currency, to_currency)] = rate
        self._rates[(to_currency, from_currency)] = 1.0 / rate

    @classmethod
    def from_rows(cls, rows, base, quote, skip_header=True, report=None):
        """
        Build a table from tabular rows of the form [label, rate, ...]

        Each valid row gives the rate for 1 base = rate quote; when several
        rows are present the last valid one wins. Malformed rows are skipped.

        Args:
            rows: Iterable of row field lists
            base: Currency the row rate converts from (e.g. 'USD')
            quote: Currency the row rate converts to (e.g. 'EUR')
            skip_header: Ignore the first row
            report: Optional LoadReport to fill in

        Returns:
            RateTable (possibly empty)
        """
        if report is None:
            report = LoadReport()
        table = cls()

        for index, row in enumerate(rows):
            if skip_header and index == 0:
                continue
            if not row or all(not field.strip() for field in row):
                continue

            report.rows_seen += 1
            rate = _parse_rate(row)
            if rate is None:
                report.rows_skipped += 1
                logger.debug(f"Skipping malformed rate row {index + 1}: {row!r}")
                continue

            table._store(base, quote, rate)
            report.rows_loaded += 1

        return table

    @classmethod
    def from_file(cls, path, base, quote):
        """
        Load a rate file. A missing or unreadable file yields an empty table.

        Returns:
            (RateTable, LoadReport)
        """
        report = LoadReport()
        if path is None or not os.path.isfile(path):
            logger.error(f"Rate file not found: {path}")
            return cls(), report

        try:
            with open(path, 'r', encoding='utf-8', newline='') as f:
                report.source = path
                table = cls.from_rows(csv.reader(f), base, quote, report=report)
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            logger.error(f"Error loading exchange rates from {path}: {e}")
            return cls(), report

        return table, report

    def lookup(self, from_currency, to_currency):
        """Return the rate for the pair, or None when it is not loaded"""
        return self._rates.get((from_currency.upper(), to_currency.upper()))

    def pairs(self):
        return sorted(self._rates.items())

    def __len__(self):
        return len(self._rates)

    def __contains__(self, pair):
        from_currency, to_currency = pair
        return self.lookup(from_currency, to_currency) is not None
