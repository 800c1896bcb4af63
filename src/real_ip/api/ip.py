"""IP inspection endpoint."""

from fastapi import APIRouter, Request

from .deps import TrustedProxiesDep, resolve_request
from .models import ResolvedIP

router = APIRouter(prefix="/api/v1", tags=["ip"])


@router.get("/ip")
def inspect_ip(request: Request, trusted_proxies: TrustedProxiesDep) -> ResolvedIP:
    """
    Report the client IP resolved for this request.

    Alongside the address, the response lists the peer the server saw,
    the header family the hops were read from and the hops themselves,
    which helps when checking a proxy deployment.
    """
    return resolve_request(request, trusted_proxies)
