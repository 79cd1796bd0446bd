"""
Document Store Abstraction Layer

Usage:
    from crm_voice.db import create_document_store, StaffRepository

    store = create_document_store()
    await store.connect()
    agents = await StaffRepository(store).find_eligible(rule)
"""

from crm_voice.db.base import Document, DocumentStore, FieldFilter
from crm_voice.db.repository import (
    create_document_store,
    StaffRepository,
    CallEventRepository,
    LeadRepository,
)
from crm_voice.db.models import CallEventDB, CallLogDB

__all__ = [
    "Document",
    "DocumentStore",
    "FieldFilter",
    "create_document_store",
    "StaffRepository",
    "CallEventRepository",
    "LeadRepository",
    "CallEventDB",
    "CallLogDB",
]
