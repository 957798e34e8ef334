"""
Funding memory: per-browser "remembered" flags for funding sources.

State lives entirely in the request's SDK cookie. Expiry is checked when the
cookie is read; expired entries are never purged on write.
"""

from __future__ import annotations

import time
from collections.abc import Mapping, Sequence

from starlette.requests import Request
from starlette.responses import Response

from app.funding.constants import LEGACY_COOKIE_VALUE
from app.funding.cookie_settings import cookie_settings_for
from app.funding.cookie_store import CookieStore, sdk_cookie_store
from app.funding.models import FundingEntry, FundingSourceConfig


def get_timestamp() -> int:
    return int(time.time())


def is_funding_remembered(
    request: Request,
    funding_source: str,
    config: FundingSourceConfig | None = None,
    now: int | None = None,
    cookies: Mapping[str, str] | None = None,
    store: CookieStore = sdk_cookie_store,
) -> bool:
    effective = cookies if cookies is not None else request.cookies
    config = config or cookie_settings_for(funding_source)
    now = get_timestamp() if now is None else now

    # A present legacy cookie wins outright, expiry included
    if config.legacy_read and config.legacy_key and effective.get(config.legacy_key):
        return True

    sdk_cookie = store.read(request, effective)
    entry = sdk_cookie.funding.get(funding_source) or FundingEntry()

    if entry.expiry and entry.expiry < now:
        return False

    return bool(entry.remembered)


def remember_funding(
    request: Request,
    response: Response,
    funding_sources: Sequence[str],
    now: int | None = None,
    settings_table: Mapping[str, FundingSourceConfig] | None = None,
    store: CookieStore = sdk_cookie_store,
) -> None:
    """
    Mark each funding source as remembered and write the SDK cookie once.

    Sources already in the cookie but not in `funding_sources` are kept as-is.
    """
    now = get_timestamp() if now is None else now
    sdk_cookie = store.read(request)
    legacy_keys: set[str] = set()

    for funding_source in funding_sources:
        entry = sdk_cookie.funding.setdefault(funding_source, FundingEntry())
        entry.remembered = True

        config = cookie_settings_for(funding_source, settings_table)
        if config.legacy_write and config.legacy_key:
            legacy_keys.add(config.legacy_key)

        if config.expiry:
            entry.expiry = now + config.expiry

    # One Set-Cookie per legacy name, however often its source repeats
    for legacy_key in sorted(legacy_keys):
        response.set_cookie(
            legacy_key,
            LEGACY_COOKIE_VALUE,
            max_age=store.max_age,
            path="/",
            secure=store.secure,
            samesite=store.samesite,
        )

    store.write(response, sdk_cookie)
