"""AI chat support client.

The client is built once at application start-up and handed to routes through
``app.state``; it never retries, and any failure turns into a fixed reply that
points the student at the crisis helpline.
"""

import logging
from dataclasses import dataclass

from openai import OpenAI, OpenAIError

from backend.core import config
from backend.support.moderation import HELPLINE_NAME, HELPLINE_NUMBER

logger = logging.getLogger(__name__)

FALLBACK_REPLY = (
    "I'm sorry, I'm having trouble responding right now. Please try again, or if you need "
    f"immediate support, please contact the KIRAN helpline at {HELPLINE_NUMBER}."
)

SYSTEM_PROMPT = (
    'You are a warm, supportive mental health companion for college students. Listen, validate '
    'feelings, suggest healthy coping strategies and encourage students to book a session with a '
    'campus counselor when appropriate. You are not a therapist and must not diagnose. If a student '
    f'mentions self-harm or suicide, urge them to call the {HELPLINE_NAME} at {HELPLINE_NUMBER} or '
    'local emergency services immediately.'
)


@dataclass(frozen=True)
class ChatMessage:
    role: str  # user/assistant
    content: str


class ChatSupportClient:
    def __init__(
        self,
        client: OpenAI | None,
        model: str = config.CHAT_MODEL,
        max_history: int = config.CHAT_MAX_HISTORY,
    ) -> None:
        self.client = client
        self.model = model
        self.max_history = max_history

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def build_messages(self, history: list[ChatMessage]) -> list[dict]:
        recent = history[-self.max_history:] if self.max_history > 0 else history
        return [{'role': 'system', 'content': SYSTEM_PROMPT}] + [
            {'role': message.role, 'content': message.content} for message in recent
        ]

    def generate(self, history: list[ChatMessage]) -> str:
        if self.client is None:
            logger.warning('Chat requested but no OPENAI_API_KEY is configured; sending fallback reply.')
            return FALLBACK_REPLY

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=self.build_messages(history),
            )
        except OpenAIError:
            logger.exception('Chat completion failed; sending fallback reply.')
            return FALLBACK_REPLY

        reply = (response.choices[0].message.content or '').strip() if response.choices else ''
        return reply or FALLBACK_REPLY

    def close(self) -> None:
        if self.client is not None:
            self.client.close()


def build_chat_client() -> ChatSupportClient:
    if not config.OPENAI_API_KEY:
        return ChatSupportClient(client=None)
    return ChatSupportClient(client=OpenAI(api_key=config.OPENAI_API_KEY))
