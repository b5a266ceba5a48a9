# deskcrm/routers/users.py
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from deskcrm.deps import get_caller, get_user_handler
from deskcrm.responses import envelope_response
from deskcrm.services.handlers import Caller, UserHandler

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
async def get_all_users(handler: UserHandler = Depends(get_user_handler)):
    """Seeds the default administrator on an empty store. Passwords are never returned."""
    return envelope_response(handler.get_all())


@router.post("")
async def add_user(
    user: Dict[str, Any] = Body(...),
    caller: Caller = Depends(get_caller),
    handler: UserHandler = Depends(get_user_handler),
):
    return envelope_response(handler.add(user, caller))


@router.patch("/{user_id}")
async def update_user(
    user_id: str,
    updates: Dict[str, Any] = Body(...),
    caller: Caller = Depends(get_caller),
    handler: UserHandler = Depends(get_user_handler),
):
    return envelope_response(handler.update(user_id, updates, caller))


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    caller: Caller = Depends(get_caller),
    handler: UserHandler = Depends(get_user_handler),
):
    return envelope_response(handler.delete(user_id, caller))
