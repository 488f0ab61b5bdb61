"""Built-in agents."""

from unoroom.agents.human_agent import HumanAgent
from unoroom.agents.random_agent import RandomAgent

__all__ = ["HumanAgent", "RandomAgent"]
