# app/routers/leads.py - ICP lead matching endpoint

from fastapi import APIRouter, Depends

from app.config import Settings, get_settings
from app.database import StoreClient, get_store
from app.models.leads import LeadsResponse
from app.routers._responses import ErrorEnvelope
from app.services.lead_matching import get_leads

router = APIRouter()


@router.get(
    "/{slug}",
    response_model=LeadsResponse,
    responses={
        404: {"model": ErrorEnvelope},
        422: {"model": ErrorEnvelope},
        500: {"model": ErrorEnvelope},
    },
)
async def get_leads_for_profile(
    slug: str,
    store: StoreClient = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Leads matching the company and person criteria of an ICP."""
    return await get_leads(store, slug, settings)
