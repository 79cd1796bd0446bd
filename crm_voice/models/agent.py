"""
Staff / agent models as read from the staff collection
"""

from typing import Any, Dict, FrozenSet, Iterable, Optional
from pydantic import BaseModel, ConfigDict, Field


class StaffRole:
    """Roles used by staff administration"""
    ADMIN = "Admin"
    SUPERVISOR = "Supervisor"
    BROKER = "Broker"


class Agent(BaseModel):
    """A staff member that may receive routed calls"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    can_receive_incoming_calls: bool = Field(default=False, alias="canReceiveIncomingCalls")

    @classmethod
    def from_document(cls, document_id: str, data: Dict[str, Any]) -> "Agent":
        return cls.model_validate({**data, "id": document_id})


class EligibilityRule(BaseModel):
    """
    Which agents may take a routed call

    An agent is eligible when its role is in ``roles`` or, if
    ``require_incoming_flag`` is set, when it has the
    ``canReceiveIncomingCalls`` flag.
    """
    model_config = ConfigDict(frozen=True)

    roles: FrozenSet[str] = frozenset()
    require_incoming_flag: bool = False

    @classmethod
    def for_roles(cls, roles: Iterable[str]) -> "EligibilityRule":
        return cls(roles=frozenset(roles))

    @classmethod
    def incoming_flag(cls) -> "EligibilityRule":
        return cls(require_incoming_flag=True)

    def matches(self, agent: Agent) -> bool:
        if agent.role is not None and agent.role in self.roles:
            return True
        return self.require_incoming_flag and agent.can_receive_incoming_calls

    @property
    def is_empty(self) -> bool:
        return not self.roles and not self.require_incoming_flag
