"""
Run the provisioning responders on an interface
"""

import os
import sys

from ..common.config import EXHAUSTED_POLICIES, load_config
from ..services.provisioner import Provisioner
from ..utils.interface import FALLBACK_ADDRESS, ensure_interface_address


def register_serve_commands(subparsers):
    """Register the serve command"""
    serve_parser = subparsers.add_parser('serve', help='Run DHCP, DNS and HTTP responders')
    serve_parser.add_argument('interface', help='Network interface to serve on')
    serve_parser.add_argument('-c', '--config', help='YAML configuration file')
    serve_parser.add_argument('--fallback-address', default=FALLBACK_ADDRESS,
                              help=f'Address assigned when the interface has none (default {FALLBACK_ADDRESS})')
    serve_parser.add_argument('--exhausted-policy', choices=EXHAUSTED_POLICIES,
                              help='What to do when the address pool is used up')
    serve_parser.add_argument('--no-dns', action='store_true', help='Do not run the DNS responder')
    serve_parser.add_argument('--no-http', action='store_true', help='Do not run the HTTP responder')
    serve_parser.add_argument('--health-port', type=int,
                              help='Port for the status endpoint (0 disables it)')
    serve_parser.set_defaults(func=serve)


def build_overrides(args):
    """Config overrides from command line flags; unset flags are left alone"""
    overrides = {
        'exhausted_policy': args.exhausted_policy,
        'health_port': args.health_port,
    }
    if args.no_dns:
        overrides['enable_dns'] = False
    if args.no_http:
        overrides['enable_http'] = False
    return overrides


def serve(args):
    """Bootstrap the interface and serve until signalled"""
    if os.geteuid() != 0:
        print("This command must be run as root", file=sys.stderr)
        sys.exit(1)

    address = ensure_interface_address(args.interface, args.fallback_address)
    config = load_config(
        address,
        interface=args.interface,
        config_file=args.config,
        overrides=build_overrides(args),
    )
    Provisioner(config).serve_forever()
