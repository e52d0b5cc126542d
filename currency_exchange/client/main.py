import argparse
import logging
import socket
import sys

import requests

from currency_exchange.client.config import CURRENCIES
from currency_exchange.client.network import ExchangeClient
from currency_exchange.client.settings import Settings

logger = logging.getLogger('Currency-Exchange')


def parse_args(argv=None, settings=None):
    settings = settings or Settings()
    parser = argparse.ArgumentParser(
        prog='currency-exchange-client',
        description='Request an exchange rate from a currency exchange server'
    )
    parser.add_argument('from_currency', nargs='?', type=str.upper, choices=CURRENCIES,
                        default=settings.get('from_currency'))
    parser.add_argument('to_currency', nargs='?', type=str.upper, choices=CURRENCIES,
                        default=settings.get('to_currency'))
    parser.add_argument('--host', default=settings.get('server_ip'))
    parser.add_argument('--port', type=int, default=settings.get('server_port'))
    parser.add_argument('--api-port', type=int, default=settings.get('api_port'))
    parser.add_argument('--list-rates', action='store_true',
                        help='Show the rates loaded on the server (status API)')
    parser.add_argument('--save', action='store_true',
                        help='Remember host, port and currencies for next time')
    return parser.parse_args(argv)


def fetch_rates(host, api_port, timeout=5):
    """Get the loaded rate pairs from the server's status API"""
    response = requests.get(f"http://{host}:{api_port}/api/rates", timeout=timeout)
    response.raise_for_status()
    return response.json()["rates"]


def main(argv=None):
    logging.basicConfig(level=logging.WARNING, format='%(levelname)s: %(message)s')
    settings = Settings()
    args = parse_args(argv, settings)

    if args.list_rates:
        try:
            rates = fetch_rates(args.host, args.api_port)
        except requests.exceptions.RequestException as e:
            print(f"ERROR: {e}")
            return 1
        for rate in rates:
            print(f"1 {rate['from_currency']} = {rate['rate']:.6f} {rate['to_currency']}")
        return 0

    request = f"{args.from_currency} {args.to_currency}"
    try:
        with ExchangeClient(args.host, args.port) as client:
            response = client.request_rate(args.from_currency, args.to_currency)
    except socket.timeout:
        print(f"Request: {request}\nERROR: No response from {args.host}:{args.port}")
        return 1
    except OSError as e:
        print(f"Request: {request}\nERROR: {e}")
        return 1

    print(f"Request: {request}\nResponse: {response}")

    if args.save:
        settings.update(
            server_ip=args.host,
            server_port=args.port,
            api_port=args.api_port,
            from_currency=args.from_currency,
            to_currency=args.to_currency
        )
        settings.save()

    return 1 if response.startswith('ERROR') else 0


if __name__ == '__main__':
    sys.exit(main())
