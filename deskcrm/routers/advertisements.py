# deskcrm/routers/advertisements.py
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from deskcrm.deps import get_advertisement_handler, get_caller
from deskcrm.responses import envelope_response
from deskcrm.services.handlers import AdvertisementHandler, Caller

router = APIRouter(prefix="/advertisements", tags=["advertisements"])


@router.get("")
async def get_all_advertisements(handler: AdvertisementHandler = Depends(get_advertisement_handler)):
    return envelope_response(handler.get_all())


@router.post("")
async def add_advertisement(
    advertisement: Dict[str, Any] = Body(...),
    caller: Caller = Depends(get_caller),
    handler: AdvertisementHandler = Depends(get_advertisement_handler),
):
    return envelope_response(handler.add(advertisement, caller))


@router.post("/bulk")
async def bulk_add_advertisements(
    advertisements: List[Dict[str, Any]] = Body(...),
    caller: Caller = Depends(get_caller),
    handler: AdvertisementHandler = Depends(get_advertisement_handler),
):
    """Import pipeline entry point: the whole batch lands with one read and one write."""
    return envelope_response(handler.bulk_add(advertisements, caller))


@router.patch("/{advertisement_id}")
async def update_advertisement(
    advertisement_id: str,
    updates: Dict[str, Any] = Body(...),
    caller: Caller = Depends(get_caller),
    handler: AdvertisementHandler = Depends(get_advertisement_handler),
):
    return envelope_response(handler.update(advertisement_id, updates, caller))


@router.delete("/{advertisement_id}")
async def delete_advertisement(
    advertisement_id: str,
    caller: Caller = Depends(get_caller),
    handler: AdvertisementHandler = Depends(get_advertisement_handler),
):
    return envelope_response(handler.delete(advertisement_id, caller))
