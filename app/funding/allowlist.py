import json
from pathlib import Path

from app.config import settings
from app.funding.models import AllowList, ClientConfig


def load_allowed_clients(path: str | Path | None = None) -> AllowList:
    """
    Loads the client allow-list from JSON:
      {"<clientID>": {"allowedFunding": [...], "allowedDomains": [...]}}
    Raises on a malformed file; a bad allow-list must stop startup.
    """
    with open(path or settings.ALLOWED_CLIENTS_PATH, encoding="utf-8") as f:
        raw = json.load(f)
    return allow_list_from_dict(raw)


def allow_list_from_dict(raw: dict) -> AllowList:
    return AllowList(
        clients={client_id: ClientConfig.model_validate(cfg) for client_id, cfg in raw.items()}
    )
