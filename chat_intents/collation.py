"""Collation — merge consecutive plain bot messages from streamed output.

With ``behavior.collateStreamedOutputs`` enabled, a bot that streams its answer
as many small text messages is shown as a single message.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from chat_intents.config import ChatConfig
from chat_intents.message import Message, Source, dig

logger = logging.getLogger(__name__)


def _is_plain_bot_text(message: Message) -> bool:
    if message.source != Source.BOT or not message.text:
        return False
    if dig(message.data, "_cognigy", "_webchat"):
        return False
    return not dig(message.data, "attachments") and not dig(message.data, "_plugin")


def can_collate(current: Message, previous: Message) -> bool:
    return _is_plain_bot_text(current) and _is_plain_bot_text(previous)


def _text_of(message: Message) -> str:
    if isinstance(message.text, list):
        return "".join(str(chunk) for chunk in message.text)
    return message.text or ""


def collate_messages(
    messages: Sequence[Message],
    config: ChatConfig | Mapping[str, Any] | None = None,
) -> list[Message]:
    """Collate consecutive plain bot messages; inputs are never modified."""
    config = ChatConfig.coerce(config)
    if not config.settings.behavior.collate_streamed_outputs or not messages:
        return list(messages)

    result: list[Message] = []
    for current in messages:
        if result:
            last = result[-1]
            last_original = last.collated_from[-1] if last.collated_from else last
            if can_collate(current, last_original):
                result[-1] = replace(
                    last,
                    text=f"{_text_of(last)}\n{_text_of(current)}",
                    collated_from=(last.collated_from or (last_original,)) + (current,),
                )
                continue
        result.append(current)

    if len(result) != len(messages):
        logger.debug("Collated %d messages into %d", len(messages), len(result))
    return result
