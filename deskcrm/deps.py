# deskcrm/deps.py
from typing import Optional

from fastapi import Depends, Header, HTTPException

from deskcrm import config
from deskcrm.services.handlers import (
    AdvertisementHandler,
    Caller,
    EnquiryHandler,
    UserHandler,
)
from deskcrm.services.security import parse_token
from deskcrm.store import JsonStore


def get_store() -> JsonStore:
    return JsonStore(config.settings.data_file)


def get_enquiry_handler(store: JsonStore = Depends(get_store)) -> EnquiryHandler:
    return EnquiryHandler(store)


def get_user_handler(store: JsonStore = Depends(get_store)) -> UserHandler:
    return UserHandler(store)


def get_advertisement_handler(store: JsonStore = Depends(get_store)) -> AdvertisementHandler:
    return AdvertisementHandler(store)


def get_caller(
    authorization: Optional[str] = Header(None),
    users: UserHandler = Depends(get_user_handler),
) -> Caller:
    """
    Reads Authorization: Bearer <token> and resolves the caller against the
    stored account, so deactivation and role changes apply immediately.
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = parse_token(authorization.split(" ", 1)[1].strip())
    if payload is None:
        raise HTTPException(status_code=401, detail="Session expired or invalid")

    user = users.find(payload["sub"])
    if not user or user.get("isActive", True) is False:
        raise HTTPException(status_code=401, detail="Account not found or inactive")

    return Caller(id=user["id"], username=user.get("username", ""), role=user.get("role", "user"))
