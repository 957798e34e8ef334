from __future__ import annotations

import base64
import binascii
import json
import logging
from collections.abc import Mapping

from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import Response

from app.config import settings
from app.funding.models import SDKCookie

log = logging.getLogger("funding_memory")


def encode_cookie(cookie: SDKCookie) -> str:
    """JSON -> unpadded urlsafe base64, so the value never needs cookie quoting."""
    payload = cookie.model_dump_json(exclude_none=True)
    return base64.urlsafe_b64encode(payload.encode("utf-8")).rstrip(b"=").decode("ascii")


def decode_cookie(raw: str | None) -> SDKCookie:
    """Decode a raw cookie value; anything unreadable becomes an empty SDKCookie."""
    if not raw:
        return SDKCookie()
    try:
        padded = raw + "=" * (-len(raw) % 4)
        data = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
        if not isinstance(data, dict):
            raise ValueError("sdk cookie payload is not an object")
        return SDKCookie.model_validate(data)
    except (binascii.Error, UnicodeError, ValueError, ValidationError) as e:
        # json.JSONDecodeError is a ValueError
        log.info('sdk_cookie_degraded err="%s"', type(e).__name__)
        return SDKCookie()


class CookieStore:
    """Reads and writes the one structured SDK cookie."""

    def __init__(
        self,
        name: str,
        max_age: int,
        secure: bool = True,
        samesite: str = "none",
    ):
        self.name = name
        self.max_age = max_age
        self.secure = secure
        self.samesite = samesite

    @classmethod
    def from_settings(cls) -> CookieStore:
        return cls(
            name=settings.SDK_COOKIE_NAME,
            max_age=settings.SDK_COOKIE_MAX_AGE_SECONDS,
            secure=settings.SDK_COOKIE_SECURE,
            samesite=settings.SDK_COOKIE_SAMESITE,
        )

    def read(self, request: Request, cookies: Mapping[str, str] | None = None) -> SDKCookie:
        source = cookies if cookies is not None else request.cookies
        return decode_cookie(source.get(self.name))

    def write(self, response: Response, cookie: SDKCookie) -> None:
        # Drop an earlier Set-Cookie for the same name so the last write wins
        prefix = f"{self.name}=".encode("latin-1")
        response.raw_headers[:] = [
            (k, v)
            for k, v in response.raw_headers
            if not (k.lower() == b"set-cookie" and v.startswith(prefix))
        ]
        response.set_cookie(
            self.name,
            encode_cookie(cookie),
            max_age=self.max_age,
            path="/",
            secure=self.secure,
            httponly=True,
            samesite=self.samesite,
        )


# Global singleton
sdk_cookie_store = CookieStore.from_settings()
