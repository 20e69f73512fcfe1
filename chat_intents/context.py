"""Message context — the per-message bundle every handler can read.

The context is bound for the duration of one message's render pass, so nested
handlers (a button inside a card inside a gallery item) can reach the message,
config and callbacks without each layer forwarding them. It flows strictly top
down: once bound, nothing inside the render pass may bind another.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Callable

from chat_intents.config import ChatConfig
from chat_intents.message import Message

logger = logging.getLogger(__name__)

# (text, data, options) -> None; data passes through to the socket client untouched
MessageSender = Callable[[str | None, Mapping[str, Any] | None, Mapping[str, Any] | None], Any]
AnalyticsCallback = Callable[[str, Any], Any]


class MessageContextError(RuntimeError):
    """Raised when the message context is missing or re-provided."""


def _noop(*args: Any, **kwargs: Any) -> None:
    return None


@dataclass(frozen=True)
class MessageContext:
    message: Message
    config: ChatConfig
    send_action: MessageSender = _noop
    on_analytics: AnalyticsCallback = _noop

    @classmethod
    def create(
        cls,
        message: Message,
        config: ChatConfig | Mapping[str, Any] | None = None,
        send_action: MessageSender | None = None,
        on_analytics: AnalyticsCallback | None = None,
    ) -> MessageContext:
        return cls(
            message=message,
            config=ChatConfig.coerce(config),
            send_action=send_action or _noop,
            on_analytics=on_analytics or _noop,
        )

    def send(
        self,
        text: str | None = None,
        data: Mapping[str, Any] | None = None,
        **options: Any,
    ) -> None:
        """Hand a postback to the host. Fire-and-forget: the result is not awaited."""
        self.send_action(text, data, options or None)

    def emit_analytics(self, event: str, payload: Any = None) -> None:
        self.on_analytics(event, payload)


_current: ContextVar[MessageContext | None] = ContextVar("message_context", default=None)


@contextmanager
def provide_message_context(context: MessageContext) -> Iterator[MessageContext]:
    """Bind ``context`` for the enclosed render pass."""
    if _current.get() is not None:
        raise MessageContextError("A message context is already provided for this render pass")
    token = _current.set(context)
    try:
        yield context
    finally:
        _current.reset(token)


def use_message_context() -> MessageContext:
    """Return the bound message context."""
    context = _current.get()
    if context is None:
        logger.error("use_message_context called outside of a message render pass")
        raise MessageContextError("use_message_context must be used within a message render pass")
    return context


def use_message_context_optional() -> MessageContext | None:
    return _current.get()
