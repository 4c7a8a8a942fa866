"""Client IP resolution for quota keying."""

from typing import Mapping, Optional

UNKNOWN_IP = "unknown"


def get_client_ip(
    headers: Mapping[str, str],
    peer_host: Optional[str],
    trust_proxy: bool = True,
) -> str:
    """Resolve the caller's IP address.

    With ``trust_proxy`` the left-most ``X-Forwarded-For`` entry wins, then
    ``X-Real-IP``; the socket peer is the fallback and the only source otherwise.

    Args:
        headers: Request headers (case-insensitive mapping).
        peer_host: Host of the connected socket peer, if known.
        trust_proxy: Whether proxy headers are trusted.

    Returns:
        The resolved IP, or ``"unknown"`` when nothing identifies the caller.
    """
    if trust_proxy:
        forwarded_for = headers.get("x-forwarded-for")
        if forwarded_for:
            first_hop = forwarded_for.split(",")[0].strip()
            if first_hop:
                return first_hop

        real_ip = (headers.get("x-real-ip") or "").strip()
        if real_ip:
            return real_ip

    return peer_host or UNKNOWN_IP
