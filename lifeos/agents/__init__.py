"""AI Agents package."""

from lifeos.agents.assistant import LifeAssistant, render_snapshot

__all__ = [
    "LifeAssistant",
    "render_snapshot",
]
