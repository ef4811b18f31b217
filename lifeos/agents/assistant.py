"""
Life OS Assistant

DESIGN DECISION: The assistant is a text-in, text-out collaborator.
It renders a small snapshot of the aggregate into a prompt and returns
whatever Gemini answers, as plain text. Nothing it returns is parsed or
written back to the store.

BOUNDARIES:
- NEVER mutates application data
- NEVER raises to the caller: missing credentials and SDK failures
  degrade to fixed fallback strings
"""

from typing import Any, Optional, Sequence

import google.generativeai as genai

from lifeos.audit import AuditLogger
from lifeos.config import GeminiSettings
from lifeos.models.app_data import AppData
from lifeos.models.planner import Priority


UNAVAILABLE_INSIGHTS = "AI services unavailable. Please configure your API Key."
UNAVAILABLE_CHAT = "AI services unavailable."
NO_INSIGHTS = "No insights generated."
INSIGHTS_ERROR = "Sorry, I couldn't generate insights right now."
CHAT_EMPTY = "I'm listening."
CHAT_ERROR = "I encountered an error processing your request."

DEFAULT_BRIEFING_QUERY = (
    "Provide a brief morning briefing, highlighting 3 key focus areas based "
    "on my data. Be concise and motivational."
)
DEFAULT_HISTORY_LIMIT = 20


def render_snapshot(data: AppData) -> str:
    """Summarize the parts of the aggregate the assistant is shown."""
    pending = [t for t in data.tasks if not t.completed]
    urgent = [t for t in pending if t.priority in (Priority.P1, Priority.P2)]

    return "\n".join([
        f"- Pending Tasks: {len(pending)} (High Priority P1/P2: {len(urgent)})",
        f"- Habits: {len(data.habits)} tracked.",
        f"- Financials: {len(data.transactions)} recent transactions.",
        f"- Active Contacts: {len(data.contacts)}.",
        f"- Mission: {data.mission_statement or 'Not defined yet'}.",
    ])


class LifeAssistant:
    """
    Gemini-backed coach for the dashboard and the chat panel.

    A model can be injected (tests, alternative clients); otherwise one is
    built from GeminiSettings. Without settings or an API key the
    assistant is unconfigured and answers with the unavailable messages.
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings
        self._audit_logger = audit_logger
        self._history_limit = (
            settings.max_history_messages if settings else DEFAULT_HISTORY_LIMIT
        )
        self._model = model if model is not None else self._configure_genai()

    def _configure_genai(self) -> Optional[Any]:
        if self._settings is None or not self._settings.api_key:
            return None
        genai.configure(api_key=self._settings.api_key)
        return genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            },
        )

    @property
    def is_configured(self) -> bool:
        return self._model is not None

    async def generate_life_insights(
        self,
        data: AppData,
        query: Optional[str] = None,
    ) -> str:
        """Answer query (or give a morning briefing) from a data snapshot."""
        if not self.is_configured:
            return UNAVAILABLE_INSIGHTS

        prompt = f"""You are a life coach and productivity expert analyzing the user's "Life OS" dashboard.

Current Data Snapshot:
{render_snapshot(data)}

User Query: {query or DEFAULT_BRIEFING_QUERY}

Respond in plain text, formatted nicely with markdown if needed. Keep it under 200 words."""

        return await self._generate("generate_life_insights", prompt, NO_INSIGHTS, INSIGHTS_ERROR)

    async def chat(self, history: Sequence[str], message: str) -> str:
        """
        Continue a conversation. Only the most recent messages of history
        are sent.
        """
        if not self.is_configured:
            return UNAVAILABLE_CHAT

        recent = list(history)[-self._history_limit:]
        transcript = "\n".join(recent)
        prompt = f"""System: You are Life OS Assistant, a helpful, strict but kind productivity partner.
Conversation History:
{transcript}
User: {message}"""

        return await self._generate("chat", prompt, CHAT_EMPTY, CHAT_ERROR)

    async def _generate(
        self,
        operation: str,
        prompt: str,
        empty_fallback: str,
        error_fallback: str,
    ) -> str:
        try:
            response = await self._model.generate_content_async(prompt)
            text = (response.text or "").strip()
        except Exception as e:
            if self._audit_logger:
                self._audit_logger.log_assistant_error(operation, e)
            return error_fallback

        return text or empty_fallback
