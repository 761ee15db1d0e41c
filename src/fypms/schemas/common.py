"""Response envelope shared by every endpoint.

Learn: Success responses are wrapped as

    {"statusCode": 200, "data": ..., "message": "...", "success": true}

and errors (see fypms.errors) as the same shape with success=false and
data=null. Keys are camelCase because that's what the frontend speaks.
"""

from typing import Any

from fastapi.encoders import jsonable_encoder


def api_response(data: Any, message: str, status_code: int = 200) -> dict:
    """Wrap data in the envelope. Pydantic models are dumped by alias."""
    return {
        "statusCode": status_code,
        "data": jsonable_encoder(data),
        "message": message,
        "success": status_code < 400,
    }
