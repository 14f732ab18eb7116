"""JSON envelope shared by every endpoint: {success, message, data?, errors?}."""

from typing import Any, Dict, List, Optional

from fastapi.responses import JSONResponse

from app.core.config import get_settings


def envelope(message: str, data: Optional[Dict[str, Any]] = None, status_code: int = 200) -> JSONResponse:
    content: Dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        content["data"] = data
    return JSONResponse(status_code=status_code, content=content)


def error_response(
    status_code: int,
    message: str,
    errors: Optional[List[Dict[str, Any]]] = None,
    error: Optional[Exception] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """
    Error envelope. Exception text is only exposed in development mode;
    other deployments get a generic "Internal server error".
    """
    content: Dict[str, Any] = {"success": False, "message": message}
    if errors:
        content["errors"] = errors
    if error is not None:
        content["error"] = str(error) if get_settings().is_development else "Internal server error"
    return JSONResponse(status_code=status_code, content=content, headers=headers)
