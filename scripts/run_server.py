#!/usr/bin/env python3
"""
Run the CRM voice server with the application settings

Usage:
    python scripts/run_server.py            # host, port and reload from .env
    python scripts/run_server.py --memory   # in-memory store, no Firestore credentials needed
"""

import os
import sys

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

# Load environment variables before the settings are read
load_dotenv()

if "--memory" in sys.argv[1:]:
    os.environ["DOCUMENT_STORE_BACKEND"] = "memory"

import uvicorn

from crm_voice.core.config import settings


def main():
    print(f"CRM Voice for {settings.business_name} ({settings.environment})")
    print(f"Listening on {settings.server_host}:{settings.server_port}, webhooks at {settings.webhook_url('')}")
    print(f"Document store: {settings.document_store_backend}, inbound routing: {settings.inbound_routing_mode}")
    print("-" * 50)

    uvicorn.run(
        "crm_voice.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    main()
