# deskcrm/routers/enquiries.py
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from deskcrm.deps import get_caller, get_enquiry_handler
from deskcrm.responses import envelope_response
from deskcrm.services.handlers import Caller, EnquiryHandler

router = APIRouter(prefix="/enquiries", tags=["enquiries"])


@router.get("")
async def get_all_enquiries(handler: EnquiryHandler = Depends(get_enquiry_handler)):
    return envelope_response(handler.get_all())


@router.post("")
async def add_enquiry(
    enquiry: Dict[str, Any] = Body(...),
    caller: Caller = Depends(get_caller),
    handler: EnquiryHandler = Depends(get_enquiry_handler),
):
    return envelope_response(handler.add(enquiry, caller))


@router.patch("/{enquiry_id}")
async def update_enquiry(
    enquiry_id: str,
    updates: Dict[str, Any] = Body(...),
    caller: Caller = Depends(get_caller),
    handler: EnquiryHandler = Depends(get_enquiry_handler),
):
    return envelope_response(handler.update(enquiry_id, updates, caller))


@router.delete("/{enquiry_id}")
async def delete_enquiry(
    enquiry_id: str,
    caller: Caller = Depends(get_caller),
    handler: EnquiryHandler = Depends(get_enquiry_handler),
):
    return envelope_response(handler.delete(enquiry_id, caller))
