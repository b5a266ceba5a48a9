# deskcrm/routers/auth.py
import logging

from fastapi import APIRouter, Depends

from deskcrm.deps import get_user_handler
from deskcrm.responses import envelope_response
from deskcrm.result import UNAUTHORIZED, Err, Ok
from deskcrm.schemas import LoginIn
from deskcrm.services.handlers import UserHandler, public_user
from deskcrm.services.security import create_access_token

log = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
async def login(payload: LoginIn, users: UserHandler = Depends(get_user_handler)):
    """
    Exchange credentials for a session token. The token is what every
    mutation carries; the host reads the caller's role from the stored
    account on each request.
    """
    user = users.authenticate(payload.username.strip(), payload.password)
    if not user:
        log.info("Login failed for '%s'", payload.username)
        return envelope_response(Err("Invalid username or password", UNAUTHORIZED))

    token = create_access_token({"sub": user["id"], "username": user.get("username"), "role": user.get("role")})
    log.info("Login successful: %s", user.get("username"))
    return envelope_response(Ok({"token": token, "user": public_user(user)}))
