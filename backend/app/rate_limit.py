"""Rate limiting for the backend.

Only the agent route is limited: each chat turn can fan out into several
model and tool calls. Forwarded headers are honoured only from trusted
proxies (TRUSTED_PROXY_CIDRS), otherwise the direct peer address is used.
"""

import ipaddress
from functools import lru_cache

from slowapi import Limiter
from slowapi.util import get_remote_address

from cinemem.config import get_settings

from .logging_config import get_logger

logger = get_logger("cinemem.rate_limit")

AGENT_CHAT_LIMIT = "20/minute"

_DEFAULT_TRUSTED_CIDRS = [
    "10.0.0.0/8",
    "172.16.0.0/12",
    "192.168.0.0/16",
    "127.0.0.0/8",
    "::1/128",
]


@lru_cache
def _trusted_networks() -> tuple:
    cidrs = get_settings().trusted_proxy_cidrs or _DEFAULT_TRUSTED_CIDRS
    networks = []
    for cidr in cidrs:
        try:
            networks.append(ipaddress.ip_network(cidr, strict=False))
        except ValueError:
            logger.warning(f"Ignoring invalid trusted proxy CIDR: {cidr}")
    return tuple(networks)


def _is_trusted_proxy(ip_str: str) -> bool:
    try:
        addr = ipaddress.ip_address(ip_str)
    except ValueError:
        return False
    return any(addr in network for network in _trusted_networks())


def get_client_ip(request) -> str:
    """Client IP, using the leftmost X-Forwarded-For entry behind a trusted proxy."""
    direct_ip = get_remote_address(request)
    if _is_trusted_proxy(direct_ip):
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            client_ip = forwarded_for.split(",")[0].strip()
            if client_ip:
                return client_ip
    return direct_ip


limiter = Limiter(key_func=get_client_ip)
