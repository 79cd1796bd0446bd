"""
Softphone routes for authenticated staff
"""

from fastapi import APIRouter, Depends

from crm_voice.api.dependencies import get_twilio_service
from crm_voice.api.middleware.auth import get_current_staff
from crm_voice.core.config import settings
from crm_voice.core.logging import get_logger
from crm_voice.models.agent import Agent
from crm_voice.models.call import VoiceTokenResponse
from crm_voice.services.telephony.twilio_service import TwilioService

logger = get_logger(__name__)

router = APIRouter(prefix="/voice", tags=["voice"])


@router.post("/token", response_model=VoiceTokenResponse)
async def issue_voice_token(
    staff: Agent = Depends(get_current_staff),
    twilio_service: TwilioService = Depends(get_twilio_service)
):
    """
    Issue a time-limited softphone token for the current staff member

    The token's identity is the staff id, which is also the client
    identity the routing engine dials.
    """
    token = twilio_service.create_voice_token(staff.id)
    logger.info(f"Issued voice token for {staff.id}")
    return VoiceTokenResponse(
        identity=staff.id,
        token=token,
        ttl=settings.voice_token_ttl_seconds
    )
