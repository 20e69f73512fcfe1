"""Chat message models — Message, ChannelPayload, payload accessors."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from chat_intents.config import ChatConfig, WidgetSettings

_CHANNEL_KEYS = ("_webchat", "_facebook", "_defaultPreview")
_DEFAULT_WIDGET = WidgetSettings()


class Source(str, Enum):
    USER = "user"
    BOT = "bot"
    AGENT = "agent"
    ENGAGEMENT = "engagement"


def dig(obj: Any, *path: str | int) -> Any:
    """Walk nested mappings/lists, returning None on any missing or wrong-typed step."""
    current = obj
    for key in path:
        if isinstance(key, int):
            if isinstance(current, Sequence) and not isinstance(current, str):
                if -len(current) <= key < len(current):
                    current = current[key]
                    continue
            return None
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def _as_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


@dataclass(frozen=True)
class Message:
    source: str = Source.BOT.value
    text: str | list[str] | None = None
    timestamp: str = ""
    data: Mapping[str, Any] = field(default_factory=dict)
    trace_id: str = ""
    id: str | None = None
    # Originals merged into this message by collation
    collated_from: tuple[Message, ...] = ()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> Message:
        """Build a message from a raw socket payload."""
        data = payload.get("data")
        text = payload.get("text")
        if isinstance(text, tuple):
            text = list(text)
        elif text is not None and not isinstance(text, (str, list)):
            text = str(text)
        message_id = payload.get("id")
        return cls(
            source=str(payload.get("source") or Source.BOT.value),
            text=text,
            timestamp=str(payload.get("timestamp") or ""),
            data=data if isinstance(data, Mapping) else {},
            trace_id=str(payload.get("traceId") or ""),
            id=message_id if isinstance(message_id, str) else None,
        )

    @property
    def plugin_type(self) -> str | None:
        value = dig(self.data, "_plugin", "type")
        return value if isinstance(value, str) else None


def message_id(message: Message) -> str:
    """Message id, falling back to a timestamp-based one."""
    if message.id:
        return message.id
    return f"message-{message.timestamp}"


@dataclass(frozen=True)
class ChannelPayload:
    """Typed view over a ``_webchat``/``_facebook``/``_defaultPreview`` payload."""

    raw: Mapping[str, Any]
    text: str | None = None
    quick_replies: list[Any] = field(default_factory=list)
    attachment: Mapping[str, Any] | None = None
    attachment_type: str | None = None
    template_type: str | None = None
    elements: list[Any] = field(default_factory=list)
    buttons: list[Any] = field(default_factory=list)
    has_adaptive_card: bool = False
    adaptive_card: Any = None
    adaptive_card_data: Mapping[str, Any] | None = None

    @classmethod
    def parse(cls, raw: Any) -> ChannelPayload | None:
        if not isinstance(raw, Mapping):
            return None

        text = dig(raw, "message", "text")
        attachment = dig(raw, "message", "attachment")
        if not isinstance(attachment, Mapping):
            attachment = None
        attachment_type = dig(attachment, "type")
        template_type = dig(attachment, "payload", "template_type")
        card_data = raw.get("adaptiveCardData")

        return cls(
            raw=raw,
            text=text if isinstance(text, str) else None,
            quick_replies=_as_list(dig(raw, "message", "quick_replies")),
            attachment=attachment,
            attachment_type=attachment_type if isinstance(attachment_type, str) else None,
            template_type=template_type if isinstance(template_type, str) else None,
            elements=_as_list(dig(attachment, "payload", "elements")),
            buttons=_as_list(dig(attachment, "payload", "buttons")),
            has_adaptive_card="adaptiveCard" in raw,
            adaptive_card=raw.get("adaptiveCard"),
            adaptive_card_data=card_data if isinstance(card_data, Mapping) else None,
        )

    @property
    def has_message(self) -> bool:
        return isinstance(self.raw.get("message"), Mapping)


def get_channel_payload(message: Message, config: ChatConfig | None = None) -> ChannelPayload | None:
    """Pick the channel payload a message should be rendered from.

    Priority:
        1. ``_defaultPreview`` when default preview is enabled
        2. ``_facebook`` when strict messenger sync is on and the message asks for it
        3. ``_webchat``, then ``_facebook``
    """
    cognigy = dig(message.data, "_cognigy")
    if not isinstance(cognigy, Mapping):
        return None

    channels = {key: cognigy.get(key) for key in _CHANNEL_KEYS}
    widget = config.settings.widget_settings if config is not None else _DEFAULT_WIDGET

    if widget.enable_default_preview and channels["_defaultPreview"]:
        return ChannelPayload.parse(channels["_defaultPreview"])

    if (
        widget.enable_strict_messenger_sync
        and cognigy.get("syncWebchatWithFacebook")
        and channels["_facebook"]
    ):
        return ChannelPayload.parse(channels["_facebook"])

    return ChannelPayload.parse(channels["_webchat"] or channels["_facebook"])
