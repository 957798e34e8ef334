from dataclasses import dataclass
from enum import Enum
from typing import Any


class RememberRejectReason(str, Enum):
    # Missing or malformed query params
    MISSING_FUNDING_SOURCES = "missing_funding_sources"
    MISSING_SDK_META = "missing_sdk_meta"
    MISSING_CLIENT_ID = "missing_client_id"
    INVALID_DOMAIN_PARAM = "invalid_domain_param"

    # Allow-list
    UNKNOWN_CLIENT = "unknown_client"
    UNKNOWN_FUNDING_SOURCE = "unknown_funding_source"
    FUNDING_NOT_ALLOWED = "funding_not_allowed"
    DOMAIN_NOT_ALLOWED = "domain_not_allowed"

    # Opaque metadata
    INVALID_SDK_META = "invalid_sdk_meta"


@dataclass
class RememberRejection:
    reason: RememberRejectReason
    message: str
    status_code: int = 400
    details: dict[str, Any] | None = None

