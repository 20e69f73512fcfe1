"""Built-in classification rules — one predicate per supported message shape.

Rules are evaluated in catalog order and the first non-passthrough match wins,
so the order below is significant: specific payload shapes come first and
plain text is the fallback.

Every predicate is total: a missing or wrong-typed field means "no match".
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

from chat_intents.config import ChatConfig
from chat_intents.message import Message, Source, dig, get_channel_payload

logger = logging.getLogger(__name__)

Predicate = Callable[[Message, ChatConfig], bool]


@dataclass(frozen=True)
class RuleOptions:
    passthrough: bool = False  # keep matching after this rule
    fullscreen: bool = False
    fullwidth: bool = False

    @classmethod
    def from_value(cls, value: RuleOptions | Mapping[str, Any] | None) -> RuleOptions:
        if isinstance(value, RuleOptions):
            return value
        if not isinstance(value, Mapping):
            return cls()
        return cls(
            passthrough=value.get("passthrough") is True,
            fullscreen=value.get("fullscreen") is True,
            fullwidth=value.get("fullwidth") is True,
        )


@dataclass(frozen=True)
class Rule:
    """A named predicate used to classify a message."""

    name: str
    match: Predicate
    options: RuleOptions = field(default_factory=RuleOptions)


# ── predicates ───────────────────────────────────────────────────────────────


def is_xapp_submit(message: Message, config: ChatConfig) -> bool:
    return message.plugin_type == "x-app-submit"


def is_webchat3_event(message: Message, config: ChatConfig) -> bool:
    return bool(dig(message.data, "_cognigy", "_webchat3", "type"))


def is_date_picker(message: Message, config: ChatConfig) -> bool:
    return message.plugin_type == "date-picker"


def is_text_with_buttons(message: Message, config: ChatConfig) -> bool:
    channel = get_channel_payload(message, config)
    if channel is None:
        return False

    # With default preview on, a message lacking a preview but carrying plain
    # text renders as text instead.
    preview_enabled = config.settings.widget_settings.enable_default_preview
    has_preview = bool(dig(message.data, "_cognigy", "_defaultPreview"))
    if preview_enabled and not has_preview and message.text:
        return False

    return bool(channel.quick_replies) or channel.template_type == "button"


def _attachment_type_is(kind: str) -> Predicate:
    def predicate(message: Message, config: ChatConfig) -> bool:
        channel = get_channel_payload(message, config)
        return channel is not None and channel.attachment_type == kind

    predicate.__name__ = f"is_{kind}_attachment"
    return predicate


def _template_type_is(kind: str) -> Predicate:
    def predicate(message: Message, config: ChatConfig) -> bool:
        channel = get_channel_payload(message, config)
        return channel is not None and channel.template_type == kind

    predicate.__name__ = f"is_{kind}_template"
    return predicate


def has_file_attachments(message: Message, config: ChatConfig) -> bool:
    attachments = dig(message.data, "attachments")
    return isinstance(attachments, list) and len(attachments) > 0


def is_adaptive_card(message: Message, config: ChatConfig) -> bool:
    webchat = dig(message.data, "_cognigy", "_webchat")
    preview = dig(message.data, "_cognigy", "_defaultPreview")
    preview_enabled = config.settings.widget_settings.enable_default_preview

    # A preview that carries a regular message wins over any card
    if preview_enabled and isinstance(preview, Mapping) and preview.get("message"):
        return False

    webchat_card = isinstance(webchat, Mapping) and "adaptiveCard" in webchat
    preview_card = isinstance(preview, Mapping) and "adaptiveCard" in preview
    return (
        webchat_card
        or (preview_card and preview_enabled)
        or message.plugin_type == "adaptivecards"
    )


def is_text(message: Message, config: ChatConfig) -> bool:
    if message.source == Source.ENGAGEMENT and not config.settings.layout.show_engagement_in_chat:
        return False

    if has_file_attachments(message, config):
        return False

    text = message.text
    if isinstance(text, list):
        return len(text) > 0

    if isinstance(text, str) and text != "":
        # Whitespace-only chunks only count when streamed output is collated
        if text.strip() or config.settings.behavior.collate_streamed_outputs:
            return True

    channel = get_channel_payload(message, config)
    return channel is not None and bool(channel.text and channel.text.strip())


# ── catalog ──────────────────────────────────────────────────────────────────


def create_default_rules() -> list[Rule]:
    """Return the built-in rules in evaluation order."""
    return [
        Rule("XAppSubmit", is_xapp_submit),
        Rule("Webchat3Event", is_webchat3_event),
        Rule("DatePicker", is_date_picker),
        Rule("TextWithButtons", is_text_with_buttons),
        Rule("Image", _attachment_type_is("image")),
        Rule("Video", _attachment_type_is("video")),
        Rule("Audio", _attachment_type_is("audio")),
        Rule("File", has_file_attachments),
        Rule("List", _template_type_is("list")),
        Rule("Gallery", _template_type_is("generic")),
        Rule("AdaptiveCard", is_adaptive_card),
        Rule("Text", is_text),
    ]


DEFAULT_RULES: tuple[Rule, ...] = tuple(create_default_rules())

BUILTIN_RULE_NAMES: tuple[str, ...] = tuple(rule.name for rule in DEFAULT_RULES)
