"""Twilio integration: REST client, access tokens and TwiML rendering"""

from .twilio_service import TwilioService
from .twiml import TwimlBuilder, TWIML_MEDIA_TYPE

__all__ = ["TwilioService", "TwimlBuilder", "TWIML_MEDIA_TYPE"]
