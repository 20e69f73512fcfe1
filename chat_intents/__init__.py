"""Chat message intents — classify messages and dispatch them to handlers."""

from chat_intents.collation import collate_messages
from chat_intents.config import ChatConfig, configure_logging
from chat_intents.context import (
    MessageContext,
    MessageContextError,
    provide_message_context,
    use_message_context,
    use_message_context_optional,
)
from chat_intents.dispatch import BUILTIN_HANDLERS, ResolvedHandler, resolve
from chat_intents.matcher import Matcher, RuleMatch, match
from chat_intents.message import ChannelPayload, Message, Source, get_channel_payload
from chat_intents.plugins import Plugin, PluginRegistry, build_effective_rules
from chat_intents.renderer import MessageRenderer, RenderedIntent, render_message
from chat_intents.rules import BUILTIN_RULE_NAMES, Rule, RuleOptions, create_default_rules

__all__ = [
    "BUILTIN_HANDLERS",
    "BUILTIN_RULE_NAMES",
    "ChannelPayload",
    "ChatConfig",
    "Matcher",
    "Message",
    "MessageContext",
    "MessageContextError",
    "MessageRenderer",
    "Plugin",
    "PluginRegistry",
    "RenderedIntent",
    "ResolvedHandler",
    "Rule",
    "RuleMatch",
    "RuleOptions",
    "Source",
    "build_effective_rules",
    "collate_messages",
    "configure_logging",
    "create_default_rules",
    "get_channel_payload",
    "match",
    "provide_message_context",
    "render_message",
    "resolve",
    "use_message_context",
    "use_message_context_optional",
]
