"""
Agent Directory
Finds staff members eligible to take a routed call and picks one
"""

import random
from typing import List, Optional, Sequence

from crm_voice.core.logging import get_logger
from crm_voice.db.repository import StaffRepository
from crm_voice.models.agent import Agent, EligibilityRule

logger = get_logger(__name__)


class AgentDirectory:
    """
    Agent lookup with a single selection policy.

    Every call path picks uniformly at random among the eligible agents
    so load spreads across the team. The random generator is created
    once per process; seeding it makes selection reproducible.
    Selection is advisory: two simultaneous calls may pick the same agent.
    """

    def __init__(self, staff_repository: StaffRepository, rng: Optional[random.Random] = None):
        self.staff_repository = staff_repository
        self.rng = rng or random.Random()

    async def eligible_agents(self, rule: EligibilityRule) -> List[Agent]:
        """
        Return all agents matching the rule.

        An empty list is a normal outcome. Raises DocumentStoreError when the
        staff collection cannot be read.
        """
        if rule.is_empty:
            return []
        agents = await self.staff_repository.find_eligible(rule)
        logger.debug(f"{len(agents)} eligible agent(s) for {rule}")
        return agents

    def choose(self, agents: Sequence[Agent]) -> Optional[Agent]:
        if not agents:
            return None
        return self.rng.choice(list(agents))

    async def select_agent(self, rule: EligibilityRule) -> Optional[Agent]:
        """Pick one eligible agent, or None when nobody is eligible"""
        agent = self.choose(await self.eligible_agents(rule))
        if agent:
            logger.info(f"Selected agent {agent.id} ({agent.role})")
        else:
            logger.info("No eligible agents available")
        return agent
