import os
from typing import Annotated

from fastapi import Depends, Header, HTTPException


# Read per request so rotated secrets apply without a restart
def _admin_token() -> str:
    return os.getenv("ADMIN_TOKEN", "")


def _api_key() -> str:
    return os.getenv("ASSESSMENT_API_KEY", "")


def require_admin(
    x_admin_token: Annotated[str | None, Header(alias="x-admin-token")] = None,
) -> None:
    """
    Strict admin-only guard. Requires the X-Admin-Token header to match ADMIN_TOKEN.
    """
    admin_token = _admin_token()
    if not admin_token:
        raise HTTPException(status_code=500, detail="ADMIN_TOKEN not configured on server.")
    if x_admin_token != admin_token:
        raise HTTPException(status_code=401, detail="Unauthorized.")


def require_client(
    x_api_key: Annotated[str | None, Header(alias="x-api-key")] = None,
    x_admin_token: Annotated[str | None, Header(alias="x-admin-token")] = None,
) -> None:
    """
    Client/API guard. Accepts either:
      - X-Admin-Token that matches ADMIN_TOKEN (admins always allowed), or
      - X-Api-Key that matches ASSESSMENT_API_KEY.
    """
    admin_token = _admin_token()
    if admin_token and x_admin_token == admin_token:
        return

    api_key = _api_key()
    if not api_key:
        raise HTTPException(status_code=500, detail="ASSESSMENT_API_KEY not configured on server.")
    if x_api_key != api_key:
        raise HTTPException(status_code=401, detail="Unauthorized.")


def current_user_id(
    _client: Annotated[None, Depends(require_client)],
    x_user_id: Annotated[str | None, Header(alias="x-user-id")] = None,
) -> str:
    """
    Caller identity, as asserted by the gateway that verified the session.
    Only trusted behind require_client.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing user identity.")
    return x_user_id.strip()


UserId = Annotated[str, Depends(current_user_id)]
