"""Shared fixtures for matcher, dispatch and render tests."""

from __future__ import annotations

import os
from typing import Any, Callable

import pytest
import yaml

from chat_intents.config import ChatConfig
from chat_intents.message import Message

FIXTURE_PATH = os.path.join(os.path.dirname(__file__), "fixtures", "match_cases.yaml")


def _load_fixture() -> dict:
    with open(FIXTURE_PATH) as f:
        return yaml.safe_load(f)


def webchat(message: dict[str, Any] | None = None, **payload: Any) -> dict[str, Any]:
    """Build ``data`` carrying a ``_webchat`` channel payload."""
    channel = dict(payload)
    if message is not None:
        channel["message"] = message
    return {"_cognigy": {"_webchat": channel}}


# ── fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture
def make_message() -> Callable[..., Message]:
    """Factory for bot messages; keyword overrides go through ``from_payload``."""

    def _make(**overrides: Any) -> Message:
        payload: dict[str, Any] = {
            "source": "bot",
            "timestamp": "1673456789000",
            "traceId": "trace-1",
            "data": {},
        }
        payload.update(overrides)
        return Message.from_payload(payload)

    return _make


@pytest.fixture
def config() -> ChatConfig:
    return ChatConfig()


@pytest.fixture
def preview_config() -> ChatConfig:
    return ChatConfig.coerce({"settings": {"widgetSettings": {"enableDefaultPreview": True}}})


@pytest.fixture(scope="session")
def match_cases() -> list[dict]:
    """Match cases from the YAML fixture, with defaults applied."""
    data = _load_fixture()
    defaults = data.get("defaults", {})
    return [{**case, "message": {**defaults, **case["message"]}} for case in data["cases"]]
