"""Entry point for spellol daily CLI client."""

import argparse
import sys

import requests

from cli.api_client import SpellolAPIClient
from cli.console import ConsoleUI
from core.config import DIFFICULTIES


def main():
    parser = argparse.ArgumentParser(description='Spellol - daily spelling word rotation')
    parser.add_argument(
        '--server',
        default='http://localhost:8000',
        help='Server URL (default: http://localhost:8000)'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)
    subparsers.add_parser('rotate', help='Trigger a rotation now')
    daily = subparsers.add_parser('daily', help='Show the active daily set')
    daily.add_argument('--difficulty', choices=DIFFICULTIES, default=None)
    events = subparsers.add_parser('events', help='Show recent rotation events')
    events.add_argument('--limit', type=int, default=10)
    args = parser.parse_args()

    client = SpellolAPIClient(base_url=args.server)
    ui = ConsoleUI(client)

    try:
        if args.command == 'rotate':
            ui.rotate()
        elif args.command == 'daily':
            ui.show_daily(args.difficulty)
        else:
            ui.show_events(args.limit)
    except requests.RequestException as e:
        print(f"Error: request to {client.base_url} failed: {e}")
        print("Make sure the server is running: python run_server.py")
        sys.exit(1)


if __name__ == '__main__':
    main()
