from collections.abc import Mapping

from app.funding.constants import FundingSource
from app.funding.models import FundingSourceConfig

DAY_SECONDS = 24 * 60 * 60

# Sources absent from this table get no legacy fallback and no expiry.
COOKIE_SETTINGS: dict[str, FundingSourceConfig] = {
    FundingSource.VENMO.value: FundingSourceConfig(
        legacy_read=True,
        legacy_write=True,
        legacy_key="pwv",
    ),
    FundingSource.APPLEPAY.value: FundingSourceConfig(
        expiry=30 * DAY_SECONDS,
    ),
}

_NO_SETTINGS = FundingSourceConfig()


def cookie_settings_for(
    funding_source: str,
    table: Mapping[str, FundingSourceConfig] | None = None,
) -> FundingSourceConfig:
    """Total lookup: unknown or unconfigured sources map to the all-default config."""
    table = COOKIE_SETTINGS if table is None else table
    return table.get(funding_source) or _NO_SETTINGS
