"""
Authentication Middleware
Resolves the staff member behind a bearer token
"""

from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from crm_voice.core.exceptions import AuthenticationError, StaffNotFoundError
from crm_voice.core.jwt_auth import decode_jwt_token
from crm_voice.core.logging import get_logger
from crm_voice.db.repository import StaffRepository
from crm_voice.models.agent import Agent

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)


async def get_current_staff(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Agent:
    """
    Dependency returning the authenticated staff member

    Usage:
        @router.post("/endpoint")
        async def endpoint(staff: Agent = Depends(get_current_staff)):
            ...

    Raises:
        AuthenticationError: no token, invalid token, or no ``sub`` claim
        StaffNotFoundError: the token names an unknown staff member
    """
    if not credentials or not credentials.credentials:
        raise AuthenticationError("Bearer token is required")

    payload = decode_jwt_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise AuthenticationError("Invalid or expired token")

    staff_id = str(payload["sub"])
    staff = await StaffRepository(request.app.state.document_store).get_agent(staff_id)
    if staff is None:
        logger.warning(f"Token for unknown staff member {staff_id}")
        raise StaffNotFoundError(staff_id)

    request.state.staff = staff
    return staff
