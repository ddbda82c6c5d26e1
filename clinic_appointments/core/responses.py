from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success(data: Any = None, message: str = "Operation successful", code: int = 200) -> JSONResponse:
    """Wrap a payload in the success envelope."""
    return JSONResponse(
        status_code=code,
        content={
            "status": "success",
            "code": code,
            "message": message,
            "data": jsonable_encoder(data),
        },
    )


def error(
    message: str = "An error occurred",
    errors: Optional[List[Dict[str, Any]]] = None,
    code: int = 400,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Render the error envelope with field-keyed error entries."""
    return JSONResponse(
        status_code=code,
        content={
            "status": "error",
            "code": code,
            "message": message,
            "errors": errors or [],
        },
        headers=headers,
    )
