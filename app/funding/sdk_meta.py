from __future__ import annotations

import base64
import binascii
import json
from html import escape
from urllib.parse import urlparse

from pydantic import BaseModel, Field, ValidationError

from app.config import settings

SDK_PATH = "/sdk/js"


class InvalidSDKMeta(ValueError):
    """Raised when an sdkMeta blob cannot be unpacked into a usable loader."""


class SDKMeta(BaseModel):
    url: str
    attrs: dict[str, str] = Field(default_factory=dict)

    def get_sdk_loader(self, nonce: str | None = None) -> str:
        parts = [f'src="{escape(self.url)}"']
        for key, value in sorted(self.attrs.items()):
            parts.append(f'{key}="{escape(value)}"')
        if nonce:
            parts.append(f'nonce="{escape(nonce)}"')
        return f"<script {' '.join(parts)}></script>"


def _is_provider_host(host: str, provider_domain: str) -> bool:
    return host == provider_domain or host.endswith("." + provider_domain)


def unpack_sdk_meta(blob: str, provider_domain: str | None = None) -> SDKMeta:
    """
    Decode a base64 JSON blob {"url": ..., "attrs": {...}} and check that the
    script it points at is the provider's SDK.
    """
    provider_domain = provider_domain or settings.PROVIDER_DOMAIN
    try:
        padded = blob + "=" * (-len(blob) % 4)
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        meta = SDKMeta.model_validate(json.loads(raw))
    except (binascii.Error, UnicodeError, ValueError, ValidationError) as e:
        raise InvalidSDKMeta(f"cannot decode sdk meta: {type(e).__name__}") from e

    try:
        parsed = urlparse(meta.url)
        hostname = parsed.hostname
    except ValueError as e:
        # e.g. "Invalid IPv6 URL" for an unbalanced "[" in the host
        raise InvalidSDKMeta(f"cannot parse sdk url: {meta.url}") from e

    if parsed.scheme != "https" or not hostname:
        raise InvalidSDKMeta(f"sdk url must be https: {meta.url}")
    if not _is_provider_host(hostname, provider_domain):
        raise InvalidSDKMeta(f"sdk url host not allowed: {hostname}")
    if parsed.path != SDK_PATH:
        raise InvalidSDKMeta(f"sdk url path not allowed: {parsed.path}")

    for key in meta.attrs:
        if not key.startswith("data-") or not key[5:].replace("-", "").isalnum():
            raise InvalidSDKMeta(f"sdk attribute not allowed: {key}")

    return meta
