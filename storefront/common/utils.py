from datetime import datetime,timezone
from typing import Any, Dict, Optional, Union

from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from storefront.common.constants import request_id_ctx

def now() -> datetime:
    return datetime.now(timezone.utc)


def build_success(data: Optional[Dict[str, Any]] = None, request_id: Optional[str] = None) -> Dict[str, Any]:
    body = {"ok": True}
    body.update(data or {})
    if request_id is None:
        request_id = request_id_ctx.get(None)
    if request_id:
        body["request_id"] = request_id
    return body

def build_error(code: Union[str, int] = "UNKNOWN_ERROR",
                message: Optional[Any] = None,
                request_id: Optional[str] = None) -> Dict[str, Any]:
   
    return {
        "ok": False,
        "error": {"code": code, "message": message},
        "request_id": request_id,
    }

def json_ok(content: Dict[str, Any], status_code: int = 200,headers = None) -> JSONResponse:
    return JSONResponse(jsonable_encoder(content), status_code=status_code,headers=headers)

def json_error(content: Dict[str, Any], status_code: int = 500, headers=None) -> JSONResponse:
    return JSONResponse(content, status_code=status_code, headers=headers)

def success_response(data: Optional[Dict[str, Any]] = None, status_code: int = 200,
                     headers: Optional[Dict[str, Any]] = None) -> JSONResponse:
    content = build_success(data)
    return json_ok(content, status_code=status_code,headers=headers)


def isoformat_or_none(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    # sqlite hands back naive datetimes; everything is stored as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()
