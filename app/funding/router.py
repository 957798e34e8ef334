from fastapi import APIRouter, Query, Request

from app.funding.constants import VALID_FUNDING_SOURCES
from app.funding.gateway import remember_funding_iframe
from app.funding.memory import is_funding_remembered
from app.funding.models import AllowList


def build_router(allowed_clients: AllowList) -> APIRouter:
    """
    Routes for funding memory. The allow-list is bound here, once, and shared
    read-only by every request.
    """
    router = APIRouter(tags=["funding"])

    router.add_api_route(
        "/remember-funding",
        remember_funding_iframe(allowed_clients),
        methods=["GET"],
        include_in_schema=False,
    )

    @router.get("/funding/remembered")
    def funding_remembered(
        request: Request,
        funding_source: str = Query(..., alias="fundingSource"),
    ):
        # Unknown sources are simply never remembered
        remembered = funding_source in VALID_FUNDING_SOURCES and is_funding_remembered(
            request, funding_source
        )
        return {"fundingSource": funding_source, "remembered": remembered}

    return router
