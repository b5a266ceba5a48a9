# deskcrm/responses.py
from fastapi.responses import JSONResponse

from deskcrm.result import Err, Result, status_code_for, to_envelope


def envelope_response(result: Result) -> JSONResponse:
    return JSONResponse(to_envelope(result), status_code=status_code_for(result))


def error_response(message: str, code: str, status_code: int) -> JSONResponse:
    return JSONResponse(to_envelope(Err(message, code)), status_code=status_code)
