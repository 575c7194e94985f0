import ipaddress
import socket

from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


def _candidate_addresses():
    """IPv4 addresses this host is reachable on, loopback excluded."""
    addresses = []
    # Routing trick: no packet is sent for a UDP connect
    probe = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        probe.connect(('10.255.255.255', 1))
        addresses.append(probe.getsockname()[0])
    except OSError:
        pass
    finally:
        probe.close()
    try:
        for info in socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET):
            addresses.append(info[4][0])
    except OSError:
        pass
    return addresses


def local_ip(override=None):
    """LAN address judges should connect to.

    ``override`` wins; otherwise private ranges are preferred and link-local
    (169.254.x.x) addresses are skipped as unreachable from other devices.
    """
    if override:
        return override
    candidates = []
    for addr in _candidate_addresses():
        ip = ipaddress.ip_address(addr)
        if ip.is_loopback or ip.is_link_local or addr in candidates:
            continue
        candidates.append(addr)
    if not candidates:
        return '127.0.0.1'
    for addr in candidates:
        if ipaddress.ip_address(addr).is_private:
            return addr
    return candidates[0]


def server_info(config):
    ip = local_ip(config.get('SERVER_IP'))
    port = config.get('PORT')
    return {'ip': ip, 'port': port, 'url': f'http://{ip}:{port}'}


@main.route('/')
def index():
    return jsonify({'message': 'TKD scoring server'})


@main.route('/api/server-info')
def get_server_info():
    return jsonify(server_info(current_app.config))
