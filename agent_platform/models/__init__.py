from agent_platform.models.agent import Agent
from agent_platform.models.execution import Execution

__all__ = [
    "Agent",
    "Execution",
]
