"""
Webhook Security Middleware
Validates Twilio webhook signatures
"""

import base64
import binascii
import hashlib
import hmac
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import parse_qsl
from fastapi import Request

from crm_voice.core.config import settings
from crm_voice.core.logging import get_logger
from crm_voice.core.exceptions import WebhookValidationError
from crm_voice.models.call import TwilioCallParams

logger = get_logger(__name__)

SIGNATURE_HEADER = "X-Twilio-Signature"


def parse_form_body(raw_body: bytes) -> List[Tuple[str, str]]:
    """Decode a form-encoded body into ordered key/value pairs"""
    return parse_qsl(raw_body.decode("utf-8"), keep_blank_values=True)


class TwilioWebhookValidator:
    """
    Validates Twilio webhook signatures
    https://www.twilio.com/docs/usage/security#validating-requests

    The same sorted-key algorithm is applied to every endpoint.
    """

    def __init__(self, auth_token: Optional[str] = None):
        self.auth_token = auth_token or settings.twilio_auth_token

    def compute_signature(self, url: str, params: Sequence[Tuple[str, str]]) -> str:
        """Compute expected Twilio signature"""
        # Keys in sorted order, each key immediately followed by its value;
        # a repeated key contributes each distinct value once, values sorted
        data = url + "".join(key + value for key, value in sorted(set(params)))

        signature = hmac.new(
            self.auth_token.encode("utf-8"),
            data.encode("utf-8"),
            hashlib.sha1
        )

        return base64.b64encode(signature.digest()).decode("utf-8")

    def is_valid(self, url: str, raw_body: bytes, signature: Optional[str]) -> bool:
        """
        Check a request signature

        Args:
            url: Full callback URL Twilio requested, including the query string
            raw_body: Unparsed request body
            signature: Value of the X-Twilio-Signature header

        Returns:
            True if the signature matches; never raises
        """
        if not signature:
            return False

        try:
            base64.b64decode(signature, validate=True)
            expected = self.compute_signature(url, parse_form_body(raw_body))
        except (ValueError, binascii.Error):
            return False

        return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))


def callback_url(request: Request) -> str:
    """
    URL Twilio was configured to call for this request

    Built from the public base URL rather than request.url so the
    signature still matches behind proxies and TLS terminators.
    """
    url = f"{settings.public_base_url.rstrip('/')}{request.url.path}"
    if request.url.query:
        url = f"{url}?{request.url.query}"
    return url


@dataclass
class TwilioWebhookRequest:
    """A webhook request whose signature has been verified"""
    url: str
    params: Dict[str, str]

    @property
    def call(self) -> TwilioCallParams:
        return TwilioCallParams.from_form(self.params)


async def validate_twilio_webhook(request: Request) -> TwilioWebhookRequest:
    """
    Dependency for validating Twilio webhooks

    Usage:
        @router.post("/webhook")
        async def webhook(webhook: TwilioWebhookRequest = Depends(validate_twilio_webhook)):
            ...

    Raises:
        WebhookValidationError: missing or invalid signature (HTTP 403)
    """
    raw_body = await request.body()
    url = callback_url(request)
    signature = request.headers.get(SIGNATURE_HEADER)

    if not signature:
        logger.warning(f"Missing Twilio signature header on {request.url.path}")
        raise WebhookValidationError("Missing X-Twilio-Signature header")

    if not TwilioWebhookValidator().is_valid(url, raw_body, signature):
        logger.warning(f"Invalid Twilio signature on {request.url.path}")
        raise WebhookValidationError("Invalid Twilio signature")

    params: Dict[str, str] = {}
    for key, value in parse_form_body(raw_body):
        params.setdefault(key, value)

    return TwilioWebhookRequest(url=url, params=params)
