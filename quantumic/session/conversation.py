"""
Conversation transcript with a two-phase assistant turn.

A user turn is appended together with a pending assistant placeholder;
the placeholder is later resolved in place with the agent's reply (or an
error text). The store enforces that at most one placeholder exists and
that it always directly follows the user message that triggered it.
"""

import logging

from quantumic.core.errors import ConversationStateError, NoPendingTurn
from quantumic.core.models import Message

logger = logging.getLogger(__name__)


class ConversationStore:
    """Ordered transcript owned by one session."""

    def __init__(self, welcome_message: str | None = None):
        """
        Args:
            welcome_message: Optional greeting placed first; never sent to the agent
        """
        self._messages: list[Message] = []
        self._has_welcome = bool(welcome_message)
        self._pending_index: int | None = None

        if welcome_message:
            self._messages.append(Message.system(welcome_message))

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def has_pending_turn(self) -> bool:
        return self._pending_index is not None

    def append_user_turn(self, content: str) -> bool:
        """
        Append a user message followed by a pending assistant placeholder.

        Blank content is ignored. Returns True if the turn was appended.

        Raises:
            ConversationStateError: a placeholder is already pending
        """
        if not content or not content.strip():
            return False
        if self._pending_index is not None:
            raise ConversationStateError("A reply is already pending")

        self._messages.append(Message.user(content))
        self._messages.append(Message.placeholder())
        self._pending_index = len(self._messages) - 1
        return True

    def resolve_pending_turn(self, content: str) -> Message:
        """
        Replace the pending placeholder with a finalized assistant message.

        Raises:
            NoPendingTurn: no placeholder exists
        """
        if self._pending_index is None:
            raise NoPendingTurn("No pending assistant turn to resolve")

        message = Message.assistant(content)
        self._messages[self._pending_index] = message
        self._pending_index = None
        return message

    def append_system_notice(self, content: str) -> Message:
        """Append an informational/error message outside the turn protocol."""
        message = Message.system(content)
        self._messages.append(message)
        logger.debug(f"System notice: {content}")
        return message

    def snapshot(self) -> tuple[Message, ...]:
        """Full transcript for rendering."""
        return tuple(self._messages)

    def send_history(self) -> list[Message]:
        """
        Messages to send to the agent for the next reply.

        Everything after the welcome message except the unresolved
        placeholder, so the new user turn is last.
        """
        start = 1 if self._has_welcome else 0
        return [m for m in self._messages[start:] if not m.pending]
