"""Built-in handlers — turn the current message into a plain view model.

Handlers take no arguments: everything they need comes from the message
context bound for the render pass. Output is a dict the host render layer
turns into markup.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from chat_intents.context import use_message_context
from chat_intents.helpers import (
    get_button_label,
    get_file_extension,
    get_file_name,
    get_size_label,
    is_image_attachment,
)
from chat_intents.message import ChannelPayload, dig, get_channel_payload

DEFAULT_OPEN_PICKER_TEXT = "Pick date"
DEFAULT_SUBMIT_PICKER_TEXT = "Submit"


def _channel() -> ChannelPayload | None:
    ctx = use_message_context()
    return get_channel_payload(ctx.message, ctx.config)


def _button_view(button: Any) -> dict[str, Any] | None:
    if not isinstance(button, Mapping):
        return None
    return {
        "label": get_button_label(button),
        "type": button.get("type") or button.get("content_type"),
        "payload": button.get("payload"),
        "url": button.get("url"),
        "image_url": button.get("image_url"),
    }


def _button_views(buttons: list[Any]) -> list[dict[str, Any]]:
    return [view for view in map(_button_view, buttons) if view is not None]


def _element_view(element: Any) -> dict[str, Any] | None:
    if not isinstance(element, Mapping):
        return None
    buttons = element.get("buttons")
    return {
        "title": element.get("title", ""),
        "subtitle": element.get("subtitle", ""),
        "image_url": element.get("image_url", ""),
        "image_alt_text": element.get("image_alt_text", ""),
        "default_action": element.get("default_action"),
        "buttons": _button_views(buttons if isinstance(buttons, list) else []),
    }


def render_text() -> dict[str, Any]:
    ctx = use_message_context()
    text = ctx.message.text
    if isinstance(text, list):
        text = "".join(str(chunk) for chunk in text)
    if not isinstance(text, str) or not text.strip():
        channel = _channel()
        if channel is not None and channel.text:
            text = channel.text
    text = text or ""
    return {
        "type": "text",
        "source": ctx.message.source,
        "text": text,
        "markdown": ctx.config.settings.behavior.render_markdown,
    }


def render_text_with_buttons() -> dict[str, Any]:
    ctx = use_message_context()
    channel = _channel()
    if channel is None:
        return {"type": "text_with_buttons", "text": "", "buttons": []}

    if channel.quick_replies:
        text = channel.text or ctx.message.text
        buttons = channel.quick_replies
    else:
        text = dig(channel.attachment, "payload", "text") or channel.text
        buttons = channel.buttons

    return {
        "type": "text_with_buttons",
        "text": text or "",
        "quick_replies": bool(channel.quick_replies),
        "buttons": _button_views(buttons),
    }


def _media_view(kind: str) -> dict[str, Any]:
    channel = _channel()
    payload = dig(channel.attachment if channel else None, "payload")
    if not isinstance(payload, Mapping):
        payload = {}
    return {
        "type": kind,
        "url": payload.get("url", ""),
        "alt_text": payload.get("altText", ""),
    }


def render_image() -> dict[str, Any]:
    ctx = use_message_context()
    view = _media_view("image")
    view["dynamic_aspect_ratio"] = ctx.config.settings.layout.dynamic_image_aspect_ratio
    return view


def render_video() -> dict[str, Any]:
    return _media_view("video")


def render_audio() -> dict[str, Any]:
    return _media_view("audio")


def render_file() -> dict[str, Any]:
    ctx = use_message_context()
    attachments = dig(ctx.message.data, "attachments")
    files = []
    for attachment in attachments if isinstance(attachments, list) else []:
        if not isinstance(attachment, Mapping):
            continue
        file_name = str(attachment.get("fileName", ""))
        size = attachment.get("size")
        mime_type = str(attachment.get("mimeType", ""))
        files.append(
            {
                "name": get_file_name(file_name),
                "extension": get_file_extension(file_name),
                "size_label": get_size_label(size) if isinstance(size, (int, float)) else "",
                "url": attachment.get("url", ""),
                "mime_type": mime_type,
                "is_image": is_image_attachment(mime_type),
            }
        )
    return {"type": "file", "text": ctx.message.text or "", "files": files}


def render_list() -> dict[str, Any]:
    channel = _channel()
    payload = dig(channel.attachment if channel else None, "payload")
    if not isinstance(payload, Mapping):
        payload = {}
    elements = [view for view in map(_element_view, channel.elements if channel else []) if view]

    header = None
    if payload.get("top_element_style") == "large" and elements:
        header, elements = elements[0], elements[1:]

    return {
        "type": "list",
        "header": header,
        "items": elements,
        "button": _button_view(dig(payload, "buttons", 0)),
    }


def render_gallery() -> dict[str, Any]:
    channel = _channel()
    elements = [view for view in map(_element_view, channel.elements if channel else []) if view]
    return {"type": "gallery", "cards": elements}


def render_date_picker() -> dict[str, Any]:
    ctx = use_message_context()
    data = dig(ctx.message.data, "_plugin", "data")
    data = dict(data) if isinstance(data, Mapping) else {}
    selected = ctx.message.text if isinstance(ctx.message.text, str) else None
    return {
        "type": "date_picker",
        "open_picker_text": data.get("openPickerButtonText") or DEFAULT_OPEN_PICKER_TEXT,
        "submit_text": data.get("submitButtonText") or DEFAULT_SUBMIT_PICKER_TEXT,
        "event_name": data.get("eventName"),
        "selected_date": selected or data.get("defaultDate"),
        "options": data,
    }


def _submitted_card_data(data: Mapping[str, Any]) -> Mapping[str, Any] | None:
    for path in (
        ("_cognigy", "_webchat", "adaptiveCardData"),
        ("_cognigy", "_defaultPreview", "adaptiveCardData"),
        ("adaptiveCardData",),
        ("request", "value"),
        ("formData",),
    ):
        value = dig(data, *path)
        if isinstance(value, Mapping) and value:
            return value
    return None


def render_adaptive_card() -> dict[str, Any]:
    ctx = use_message_context()
    data = ctx.message.data
    preview_enabled = ctx.config.settings.widget_settings.enable_default_preview

    card = None
    if preview_enabled:
        card = dig(data, "_cognigy", "_defaultPreview", "adaptiveCard")
    if card is None:
        card = dig(data, "_cognigy", "_webchat", "adaptiveCard")
    if card is None:
        card = dig(data, "_plugin", "payload")

    submitted = _submitted_card_data(data)
    readonly = ctx.config.settings.behavior.adaptive_cards_readonly
    return {
        "type": "adaptive_card",
        "card": card,
        "submitted_data": submitted,
        "readonly": readonly if readonly is not None else submitted is not None,
    }


def render_xapp_submit() -> dict[str, Any]:
    ctx = use_message_context()
    return {"type": "event", "text": ctx.message.text or "Submitted"}


def render_webchat3_event() -> dict[str, Any]:
    ctx = use_message_context()
    event = dig(ctx.message.data, "_cognigy", "_webchat3") or {}
    return {
        "type": "event",
        "event_type": event.get("type"),
        "text": dig(event, "data", "text") or ctx.message.text or "",
    }
