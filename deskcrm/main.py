# deskcrm/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from deskcrm import config
from deskcrm.deps import get_store
from deskcrm.logging_config import setup_logging
from deskcrm.responses import error_response
from deskcrm.result import ERROR, FORBIDDEN, INVALID, NOT_FOUND, UNAUTHORIZED

# Routers
from deskcrm.routers.advertisements import router as advertisements_router
from deskcrm.routers.auth import router as auth_router
from deskcrm.routers.enquiries import router as enquiries_router
from deskcrm.routers.users import router as users_router

log = logging.getLogger("deskcrm.host")

app = FastAPI(title="DeskCRM host", version="0.1.0")

_CODE_FOR_STATUS = {401: UNAUTHORIZED, 403: FORBIDDEN, 404: NOT_FOUND, 422: INVALID}


# ---------- Every failure leaves the host as an envelope ----------
@app.exception_handler(StarletteHTTPException)
async def http_error_envelope(request: Request, exc: StarletteHTTPException):
    code = _CODE_FOR_STATUS.get(exc.status_code, ERROR)
    return error_response(str(exc.detail), code, exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_envelope(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{where}: {first.get('msg')}" if where else str(first.get("msg") or "Invalid request")
    return error_response(message, INVALID, 422)


@app.exception_handler(Exception)
async def unexpected_error_envelope(request: Request, exc: Exception):
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response("Internal error", ERROR, 500)


# ---------- Simple health/root ----------
@app.get("/health")
def health():
    return {"success": True, "data": {"env": config.settings.ENV}}


# ---------- Routers (the complete boundary) ----------
app.include_router(enquiries_router)
app.include_router(users_router)
app.include_router(advertisements_router)
app.include_router(auth_router)


# ---------- Startup ----------
@app.on_event("startup")
def on_startup():
    setup_logging()
    store = get_store()
    log.info("Data will be stored at: %s", store.path)
    log.info("Running in: %s", config.settings.ENV)
    store.ensure_initialized()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.settings.HOST, port=config.settings.PORT, log_config=None)
