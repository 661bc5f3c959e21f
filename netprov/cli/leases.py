"""
Lease inspection commands
"""

import os
import sys

import requests

DEFAULT_STATUS_URL = f"http://127.0.0.1:{os.environ.get('NETPROV_HEALTH_PORT', '8067')}"


def register_leases_commands(subparsers):
    """Register lease inspection commands"""
    leases_parser = subparsers.add_parser('leases', help='Show leases held by a running server')
    leases_parser.add_argument('--url', default=DEFAULT_STATUS_URL,
                               help=f'Status endpoint base URL (default {DEFAULT_STATUS_URL})')
    leases_parser.add_argument('--timeout', type=float, default=5.0, help='Request timeout in seconds')
    leases_parser.set_defaults(func=list_leases)


def fetch_leases(url, timeout=5.0):
    response = requests.get(f"{url.rstrip('/')}/leases", timeout=timeout)
    response.raise_for_status()
    return response.json()


def format_leases(data):
    """Render the /leases payload as a table"""
    leases = data.get('leases', [])
    if not leases:
        return "No leases"

    lines = [f"{'MAC':<20} {'IP':<16} ALLOCATED"]
    lines.append('-' * 60)
    for lease in leases:
        lines.append(f"{lease['mac']:<20} {lease['ip']:<16} {lease['allocated_at']}")
    lines.append(f"\nTotal: {data.get('count', len(leases))}")
    return '\n'.join(lines)


def list_leases(args):
    """Print leases from the status endpoint"""
    try:
        data = fetch_leases(args.url, args.timeout)
    except requests.RequestException as e:
        print(f"Could not reach status endpoint at {args.url}: {e}", file=sys.stderr)
        sys.exit(1)
    print(format_leases(data))
