"""API key authentication for the admin API.

Validates the X-API-Key header against the configured admin keys.
"""

import hmac

from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader

from content_audit.config.settings import get_settings

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(api_key: str | None = Security(api_key_header)) -> str:
    """FastAPI dependency that validates the caller's API key.

    Returns the matched key. Every configured key is compared so the
    check takes the same time whichever key matches.
    """
    if api_key is None:
        raise HTTPException(status_code=401, detail="Missing API key")

    match = None
    for valid_key in get_settings().api_keys_list:
        if hmac.compare_digest(api_key, valid_key):
            match = valid_key

    if match is None:
        raise HTTPException(status_code=403, detail="Invalid API key")
    return match
