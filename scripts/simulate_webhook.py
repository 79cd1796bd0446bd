#!/usr/bin/env python3
"""
Send a signed Twilio-style webhook to a running CRM voice server

Usage:
    python scripts/simulate_webhook.py voice From=+14155550100 To=+18324005373
    python scripts/simulate_webhook.py voice From=client:agent42 To=+15551234567
    python scripts/simulate_webhook.py gather Digits=2 From=+14155550100
    python scripts/simulate_webhook.py status CallStatus=completed CallDuration=42
"""

import os
import sys
import asyncio
import httpx

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from crm_voice.api.middleware.webhook_security import TwilioWebhookValidator, SIGNATURE_HEADER
from crm_voice.core.config import settings

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")


async def send_webhook(endpoint: str, params: dict):
    """Sign the parameters for the public URL and post them to the local server"""
    signed_url = settings.webhook_url(endpoint)
    local_url = f"{API_BASE_URL}/api/v1/webhooks/twilio/{endpoint}"
    signature = TwilioWebhookValidator().compute_signature(signed_url, list(params.items()))

    print(f"POST {local_url}")
    print(f"  signed as {signed_url}")
    print(f"  params: {params}")

    async with httpx.AsyncClient(timeout=15.0) as client:
        response = await client.post(
            local_url,
            data=params,
            headers={SIGNATURE_HEADER: signature}
        )

    print(f"\nStatus: {response.status_code} ({response.headers.get('content-type')})")
    print(response.text)
    return response


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        return

    endpoint = sys.argv[1]
    params = {"CallSid": "CA" + "0" * 32, "Direction": "inbound"}
    for argument in sys.argv[2:]:
        key, _, value = argument.partition("=")
        params[key] = value

    asyncio.run(send_webhook(endpoint, params))


if __name__ == "__main__":
    main()
