from pydantic import BaseModel, ConfigDict, Field

from app.funding.constants import SDK_COOKIE_VERSION


class FundingEntry(BaseModel):
    remembered: bool = False
    expiry: int | None = Field(
        default=None, description="Epoch seconds after which the entry reads as not remembered"
    )


class SDKCookie(BaseModel):
    """
    Structured payload stored in the single SDK cookie.

    Unknown top-level keys are kept so other client state survives a rewrite.
    """

    model_config = ConfigDict(extra="allow")

    version: int = SDK_COOKIE_VERSION
    funding: dict[str, FundingEntry] = Field(default_factory=dict)


class FundingSourceConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    legacy_read: bool = False
    legacy_write: bool = False
    legacy_key: str | None = None
    expiry: int | None = Field(
        default=None, description="Remember window in seconds; None means never expires"
    )


class ClientConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    allowed_funding: frozenset[str] = Field(default_factory=frozenset, alias="allowedFunding")
    allowed_domains: frozenset[str] = Field(default_factory=frozenset, alias="allowedDomains")


class AllowList(BaseModel):
    model_config = ConfigDict(frozen=True)

    clients: dict[str, ClientConfig] = Field(default_factory=dict)

    def get(self, client_id: str) -> ClientConfig | None:
        return self.clients.get(client_id)

    def __len__(self) -> int:
        return len(self.clients)
