"""
Status endpoint exposing the lease table as JSON
"""

from datetime import datetime

from flask import Flask, jsonify

from .. import __version__
from ..dhcp.messages import format_client_id


def lease_entries(table):
    return [
        {
            'mac': format_client_id(lease.client_id),
            'ip': str(lease.address),
            'allocated_at': lease.allocated_at.isoformat(),
        }
        for lease in table.leases()
    ]


def create_app(config, table, is_running=lambda: True):
    """Flask app serving /health, /status and /leases"""
    app = Flask(__name__, static_folder=None)

    @app.route('/health')
    def health():
        running = is_running()
        data = {
            'status': 'healthy' if running else 'unhealthy',
            'timestamp': datetime.now().isoformat(),
            'server_ip': str(config.server_ip),
        }
        return jsonify(data), 200 if running else 503

    @app.route('/status')
    def status():
        return jsonify({
            'status': 'running' if is_running() else 'stopped',
            'version': __version__,
            'timestamp': datetime.now().isoformat(),
            'server_ip': str(config.server_ip),
            'network': str(config.network),
            'interface': config.interface,
            'pool': {
                'first': str(config.pool_address(config.pool.start)),
                'last': str(config.pool_address(config.pool.end)),
                'size': config.pool.size,
                'remaining': table.remaining,
            },
            'lease_count': len(table),
            'exhausted_policy': config.exhausted_policy,
        })

    @app.route('/leases')
    def leases():
        entries = lease_entries(table)
        return jsonify({
            'leases': entries,
            'count': len(entries),
            'timestamp': datetime.now().isoformat(),
        })

    return app
