# app/funding/gateway.py
from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from starlette.requests import Request
from starlette.responses import HTMLResponse, PlainTextResponse, Response

from app.config import settings
from app.funding.constants import (
    QP_CLIENT_ID,
    QP_DOMAIN,
    QP_FUNDING_SOURCES,
    QP_SDK_META,
    VALID_FUNDING_SOURCES,
)
from app.funding.cookie_store import CookieStore, sdk_cookie_store
from app.funding.exit_reasons import RememberRejection, RememberRejectReason
from app.funding.memory import get_timestamp, remember_funding
from app.funding.models import AllowList
from app.funding.sdk_meta import InvalidSDKMeta, SDKMeta, unpack_sdk_meta
from app.funding.security import get_nonce, set_security_headers
from app.metrics import FUNDING_SOURCES_REMEMBERED_TOTAL, REMEMBER_FUNDING_REQUESTS_TOTAL

log = logging.getLogger("funding_memory")

DOMAIN_RE = re.compile(r"https?://[a-zA-Z_0-9.-]+")

IFRAME_TEMPLATE = """<!DOCTYPE html>
<head>
    <link rel="icon" href="data:;base64,=">
    {loader}
    <script nonce="{nonce}">
        {namespace}.rememberFunding({funding_sources});
    </script>
</head>
"""


@dataclass
class RememberFundingRequest:
    domain: str
    client_id: str
    funding_sources: list[str]
    meta: SDKMeta


def parse_funding_sources(comma_separated: str) -> list[str]:
    return comma_separated.split(",")


class RememberFundingGateway:
    """
    Validates a cross-domain remember-funding request against a fixed allow-list.

    Checks run in order and the first failure wins:
      1) required params present
      2) domain is scheme://host
      3) client id is allow-listed
      4) every funding source is a known source
      5) every funding source is allowed for the client
      6) domain is allowed for the client
      7) sdkMeta unpacks
    Nothing is mutated here; the caller acts on the validated request.
    """

    def __init__(
        self,
        allowed_clients: AllowList,
        meta_unpacker: Callable[[str], SDKMeta] = unpack_sdk_meta,
    ):
        self.allowed_clients = allowed_clients
        self.meta_unpacker = meta_unpacker

    def check(self, query: Mapping[str, str]) -> RememberRejection | RememberFundingRequest:
        domain = query.get(QP_DOMAIN)
        comma_separated = query.get(QP_FUNDING_SOURCES)
        sdk_meta = query.get(QP_SDK_META)
        client_id = query.get(QP_CLIENT_ID)

        if not comma_separated:
            return RememberRejection(
                reason=RememberRejectReason.MISSING_FUNDING_SOURCES,
                message=f"Expected {QP_FUNDING_SOURCES} query param",
            )

        if not sdk_meta:
            return RememberRejection(
                reason=RememberRejectReason.MISSING_SDK_META,
                message=f"Expected {QP_SDK_META} query param",
            )

        if not client_id:
            return RememberRejection(
                reason=RememberRejectReason.MISSING_CLIENT_ID,
                message=f"Expected {QP_CLIENT_ID} query param",
            )

        if not domain or not DOMAIN_RE.fullmatch(domain):
            return RememberRejection(
                reason=RememberRejectReason.INVALID_DOMAIN_PARAM,
                message=f"Expected {QP_DOMAIN} query param",
                details={"domain": domain},
            )

        client_config = self.allowed_clients.get(client_id)
        if client_config is None:
            return RememberRejection(
                reason=RememberRejectReason.UNKNOWN_CLIENT,
                message=f"Invalid client id: {client_id}",
            )

        funding_sources = parse_funding_sources(comma_separated)

        for funding_source in funding_sources:
            if funding_source not in VALID_FUNDING_SOURCES:
                return RememberRejection(
                    reason=RememberRejectReason.UNKNOWN_FUNDING_SOURCE,
                    message=f"Invalid funding source: {funding_source}",
                    details={"funding_source": funding_source},
                )

        for funding_source in funding_sources:
            if funding_source not in client_config.allowed_funding:
                return RememberRejection(
                    reason=RememberRejectReason.FUNDING_NOT_ALLOWED,
                    message=f"Funding source not allowed for client: {funding_source}",
                    details={"funding_source": funding_source},
                )

        if domain not in client_config.allowed_domains:
            return RememberRejection(
                reason=RememberRejectReason.DOMAIN_NOT_ALLOWED,
                message=f"Domain not allowed for client: {domain}",
                details={"domain": domain},
            )

        try:
            meta = self.meta_unpacker(sdk_meta)
        except InvalidSDKMeta as e:
            return RememberRejection(
                reason=RememberRejectReason.INVALID_SDK_META,
                message=f"Invalid sdk meta: {sdk_meta}",
                details={"error": str(e)},
            )

        return RememberFundingRequest(
            domain=domain,
            client_id=client_id,
            funding_sources=funding_sources,
            meta=meta,
        )


def render_iframe(nonce: str, meta: SDKMeta, funding_sources: list[str]) -> str:
    return IFRAME_TEMPLATE.format(
        loader=meta.get_sdk_loader(nonce=nonce),
        nonce=nonce,
        namespace=settings.SDK_NAMESPACE,
        funding_sources=json.dumps(funding_sources),
    )


def remember_funding_iframe(
    allowed_clients: AllowList,
    clock: Callable[[], int] = get_timestamp,
    nonce_factory: Callable[[], str] = get_nonce,
    store: CookieStore = sdk_cookie_store,
    meta_unpacker: Callable[[str], SDKMeta] = unpack_sdk_meta,
) -> Callable[[Request], Response]:
    """Build the per-request iframe handler around one immutable allow-list."""
    gateway = RememberFundingGateway(allowed_clients, meta_unpacker=meta_unpacker)

    def handler(request: Request) -> Response:
        result = gateway.check(request.query_params)

        if isinstance(result, RememberRejection):
            REMEMBER_FUNDING_REQUESTS_TOTAL.labels(outcome=result.reason.value).inc()
            log.info(
                'remember_funding_rejected reason="%s" client_id="%s" details=%s',
                result.reason.value,
                request.query_params.get(QP_CLIENT_ID, "-"),
                result.details or {},
            )
            return PlainTextResponse(result.message, status_code=result.status_code)

        nonce = nonce_factory()
        response = HTMLResponse(
            render_iframe(nonce, result.meta, result.funding_sources), status_code=200
        )
        remember_funding(request, response, result.funding_sources, now=clock(), store=store)
        set_security_headers(response, nonce=nonce, domain=result.domain)

        REMEMBER_FUNDING_REQUESTS_TOTAL.labels(outcome="accepted").inc()
        for funding_source in result.funding_sources:
            FUNDING_SOURCES_REMEMBERED_TOTAL.labels(funding_source=funding_source).inc()
        log.info(
            'remember_funding_accepted client_id="%s" domain="%s" funding_sources="%s"',
            result.client_id,
            result.domain,
            ",".join(result.funding_sources),
        )
        return response

    return handler
