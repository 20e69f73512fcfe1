"""Render pass — context, match and dispatch for one message."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from chat_intents.config import ChatConfig
from chat_intents.context import (
    AnalyticsCallback,
    MessageContext,
    MessageSender,
    provide_message_context,
)
from chat_intents.dispatch import BUILTIN_HANDLERS, ResolvedHandler, resolve
from chat_intents.matcher import ConfigLike, Matcher, MessageLike, PluginsLike, as_message
from chat_intents.rules import RuleOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedIntent:
    """One rendered piece of a message, in render order."""

    name: str
    output: Any
    options: RuleOptions = field(default_factory=RuleOptions)


class MessageRenderer:
    """Renders messages with a fixed plugin set.

    Built once per plugin list; each ``render`` call owns its own context and
    match result, so messages never share state.
    """

    def __init__(
        self,
        plugins: PluginsLike = None,
        builtin_handlers: Mapping[str, Any] = BUILTIN_HANDLERS,
    ):
        self.matcher = Matcher(plugins)
        self.builtin_handlers = builtin_handlers

    def plan(self, message: MessageLike, config: ConfigLike = None) -> list[ResolvedHandler]:
        matches = self.matcher.match(message, config)
        return resolve(matches, self.matcher.rules, self.builtin_handlers)

    def render(
        self,
        message: MessageLike,
        config: ConfigLike = None,
        *,
        action: MessageSender | None = None,
        on_analytics: AnalyticsCallback | None = None,
    ) -> list[RenderedIntent]:
        """Render one message.

        Callable handlers run with the message context bound; structured
        handlers are handed back untouched for the host to render. A failing
        handler drops only its own intent.
        """
        message = as_message(message)
        config = ChatConfig.coerce(config)
        context = MessageContext.create(message, config, action, on_analytics)

        rendered: list[RenderedIntent] = []
        with provide_message_context(context):
            for step in self.plan(message, config):
                if not callable(step.handler):
                    rendered.append(RenderedIntent(step.name, step.handler, step.options))
                    continue
                try:
                    output = step.handler()
                except Exception:
                    logger.exception(
                        "Handler for %r failed (trace %s)", step.name, message.trace_id
                    )
                    continue
                rendered.append(RenderedIntent(step.name, output, step.options))
        return rendered

    def render_all(
        self,
        messages: Iterable[MessageLike],
        config: ConfigLike = None,
        *,
        action: MessageSender | None = None,
        on_analytics: AnalyticsCallback | None = None,
    ) -> list[list[RenderedIntent]]:
        config = ChatConfig.coerce(config)
        return [
            self.render(message, config, action=action, on_analytics=on_analytics)
            for message in messages
        ]


def render_message(
    message: MessageLike,
    config: ConfigLike = None,
    plugins: PluginsLike = None,
    *,
    action: MessageSender | None = None,
    on_analytics: AnalyticsCallback | None = None,
) -> list[RenderedIntent]:
    """Render one message with the built-in handlers and the given plugins."""
    return MessageRenderer(plugins).render(
        message, config, action=action, on_analytics=on_analytics
    )
