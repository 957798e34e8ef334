import secrets
from collections.abc import Mapping

from starlette.responses import Response

from app.config import settings
from app.funding.constants import HDR_ACCESS_CONTROL_ALLOW_ORIGIN, HDR_CONTENT_SECURITY_POLICY


def get_nonce() -> str:
    return secrets.token_urlsafe(16)


def build_csp(directives: Mapping[str, str]) -> str:
    return "; ".join(f"{name} {value}" for name, value in directives.items())


def set_security_headers(
    response: Response,
    nonce: str,
    domain: str,
    provider_domain: str | None = None,
) -> None:
    """Lock the iframe document down to provider scripts and a single framing origin."""
    provider = f"https://*.{provider_domain or settings.PROVIDER_DOMAIN}:*"
    response.headers[HDR_CONTENT_SECURITY_POLICY] = build_csp(
        {
            "script-src": f"'self' {provider} 'nonce-{nonce}'",
            "connect-src": f"'self' {provider}",
            "frame-ancestors": domain,
            "img-src": "data:",
            "style-src": "'none'",
            "frame-src": "'none'",
            "font-src": "'none'",
            "object-src": "'none'",
            "media-src": "'none'",
        }
    )
    response.headers[HDR_ACCESS_CONTROL_ALLOW_ORIGIN] = domain
