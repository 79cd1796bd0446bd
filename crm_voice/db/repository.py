"""
Repositories over the document store

Each repository wraps the store operations it needs in a hard timeout so
webhook handlers stay inside the provider's response budget. Operations
are never retried: a failure surfaces as DocumentStoreError and the
caller decides how the call continues.
"""

import asyncio
import logging
import uuid
from typing import Awaitable, List, Optional, TypeVar

from crm_voice.core.config import Settings, settings
from crm_voice.core.exceptions import DocumentStoreError
from crm_voice.db.adapters import FirestoreDocumentStore, InMemoryDocumentStore
from crm_voice.db.base import Document, DocumentStore, FieldFilter
from crm_voice.db.models import (
    CALL_EVENTS_COLLECTION,
    LEADS_COLLECTION,
    STAFF_COLLECTION,
    CallEventDB,
    CallLogDB,
    lead_calls_collection,
)
from crm_voice.models.agent import Agent, EligibilityRule
from crm_voice.models.call import CallEvent

logger = logging.getLogger(__name__)

T = TypeVar("T")


def create_document_store(config: Optional[Settings] = None) -> DocumentStore:
    """
    Build the document store adapter selected by configuration.

    Called once from the application lifespan; the instance is shared by
    all requests through ``app.state.document_store``.
    """
    config = config or settings
    backend = config.document_store_backend.lower()

    if backend == "memory":
        return InMemoryDocumentStore()
    if backend == "firestore":
        return FirestoreDocumentStore(
            project_id=config.firestore_project_id,
            database=config.firestore_database
        )
    raise ValueError(f"Unknown document store backend: {config.document_store_backend}")


class BaseRepository:
    """Shared timeout handling for repositories"""

    def __init__(self, store: DocumentStore, timeout: Optional[float] = None):
        self.store = store
        self.timeout = timeout if timeout is not None else settings.store_timeout_seconds

    async def _run(self, operation: Awaitable[T], name: str) -> T:
        try:
            return await asyncio.wait_for(operation, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise DocumentStoreError(
                f"timed out after {self.timeout}s", operation=name
            ) from e
        except DocumentStoreError:
            raise
        except Exception as e:
            raise DocumentStoreError(str(e), operation=name) from e


class StaffRepository(BaseRepository):
    """Read-only access to staff members"""

    async def get_agent(self, staff_id: str) -> Optional[Agent]:
        document = await self._run(
            self.store.get(STAFF_COLLECTION, staff_id), "get staff"
        )
        if document is None:
            return None
        return Agent.from_document(document.id, document.data)

    async def find_eligible(self, rule: EligibilityRule) -> List[Agent]:
        """
        Return every agent satisfying the rule.

        The store cannot OR a role filter with the capability flag, so
        each condition is queried separately and the results merged.
        """
        documents: List[Document] = []
        if rule.roles:
            documents.extend(await self._run(
                self.store.query(
                    STAFF_COLLECTION,
                    [FieldFilter("role", "in", sorted(rule.roles))]
                ),
                "query staff by role"
            ))
        if rule.require_incoming_flag:
            documents.extend(await self._run(
                self.store.query(
                    STAFF_COLLECTION,
                    [FieldFilter("canReceiveIncomingCalls", "==", True)]
                ),
                "query staff by incoming flag"
            ))

        agents = {}
        for document in documents:
            if document.id not in agents:
                agents[document.id] = Agent.from_document(document.id, document.data)

        return [agent for agent in agents.values() if rule.matches(agent)]


class CallEventRepository(BaseRepository):
    """Append-only call event log"""

    async def append(self, event: CallEvent) -> str:
        record = CallEventDB.from_event(event)
        # Suffix keeps redelivered callbacks from colliding on the same key
        document_id = f"{record.document_id()}_{uuid.uuid4().hex[:8]}"
        return await self._run(
            self.store.add(CALL_EVENTS_COLLECTION, record.to_document(), document_id=document_id),
            "append call event"
        )

    async def list_for_call(self, call_sid: str) -> List[CallEventDB]:
        documents = await self._run(
            self.store.query(CALL_EVENTS_COLLECTION, [FieldFilter("callSid", "==", call_sid)]),
            "list call events"
        )
        events = [CallEventDB.model_validate(document.data) for document in documents]
        return sorted(events, key=lambda e: e.received_at)


class LeadRepository(BaseRepository):
    """Lead lookups and per-lead call logs"""

    async def find_by_phone(self, phone: str) -> Optional[Document]:
        documents = await self._run(
            self.store.query(LEADS_COLLECTION, [FieldFilter("phone", "==", phone)], limit=1),
            "find lead by phone"
        )
        return documents[0] if documents else None

    async def append_call_log(self, call_log: CallLogDB) -> str:
        return await self._run(
            self.store.add(lead_calls_collection(call_log.lead_id), call_log.to_document()),
            "append lead call log"
        )
