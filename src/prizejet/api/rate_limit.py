"""Rate limiting configuration for the PrizeJet API."""

from fastapi import Request
from slowapi import Limiter

from prizejet.settings import settings


def client_ip(request: Request) -> str:
    """Client address as seen by the server.

    Behind a proxy the first ``X-Forwarded-For`` hop is the client.
    """
    forwarded = request.headers.get("x-forwarded-for", "")
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop
    return request.client.host if request.client else "unknown"


# Single shared limiter instance - disabled in non-production environments
limiter = Limiter(
    key_func=client_ip,
    default_limits=["200/minute"],
    storage_uri="memory://",
    enabled=settings.env == "production",
)
