"""Chat configuration — YAML files, env vars, defaults.

Section keys follow the webchat socket convention (camelCase), but snake_case
names are accepted too. Unknown keys are kept so the whole config can be passed
through to handlers untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


def _repo_root() -> Path:
    """Find the repository root (directory containing pyproject.toml)."""
    current = Path(__file__).resolve().parent.parent
    if (current / "pyproject.toml").exists():
        return current
    return Path.cwd()


REPO_ROOT = _repo_root()

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _drop_nulls(values: Mapping[str, Any]) -> dict[str, Any]:
    """Remove null entries at every level so missing sections fall back to defaults."""
    return {
        key: _drop_nulls(value) if isinstance(value, Mapping) else value
        for key, value in values.items()
        if value is not None
    }


class _Section(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class LayoutSettings(_Section):
    title: str = ""
    logo_url: str = ""
    bot_avatar_name: str = ""
    bot_logo_url: str = ""
    agent_avatar_name: str = ""
    agent_logo_url: str = ""
    disable_html_content_sanitization: bool = False
    enable_generic_html_styling: bool = False
    disable_bot_output_border: bool = False
    bot_output_max_width_percentage: int | None = None
    disable_url_button_sanitization: bool = False
    dynamic_image_aspect_ratio: bool = False
    show_engagement_in_chat: bool = False


class ColorSettings(_Section):
    primary_color: str = ""
    primary_color_hover: str = ""
    primary_color_focus: str = ""
    primary_color_disabled: str = ""
    primary_contrast_color: str = ""
    secondary_color: str = ""
    bot_message_color: str = ""
    bot_message_contrast_color: str = ""
    user_message_color: str = ""
    user_message_contrast_color: str = ""
    agent_message_color: str = ""
    agent_message_contrast_color: str = ""
    text_link_color: str = ""


class BehaviorSettings(_Section):
    render_markdown: bool = False
    enable_typing_indicator: bool = False
    message_delay: int | None = None
    collate_streamed_outputs: bool = False
    focus_input_after_postback: bool = False
    # None means "readonly only once the card carries submitted data"
    adaptive_cards_readonly: bool | None = None


class WidgetSettings(_Section):
    enable_default_preview: bool = False
    enable_strict_messenger_sync: bool = False
    custom_allowed_html_tags: list[str] = Field(default_factory=list)
    enable_auto_focus: bool = False
    disable_render_urls_as_links: bool = Field(False, alias="disableRenderURLsAsLinks")
    disable_text_input_sanitization: bool = False
    source_direction_mapping: dict[str, Literal["incoming", "outgoing"]] = Field(
        default_factory=dict
    )


class CustomTranslations(_Section):
    aria_labels: dict[str, Any] = Field(default_factory=dict)


class ChatSettings(_Section):
    layout: LayoutSettings = Field(default_factory=LayoutSettings)
    colors: ColorSettings = Field(default_factory=ColorSettings)
    behavior: BehaviorSettings = Field(default_factory=BehaviorSettings)
    widget_settings: WidgetSettings = Field(default_factory=WidgetSettings)
    custom_translations: CustomTranslations = Field(default_factory=CustomTranslations)


class ChatConfig(BaseSettings):
    """Top-level chat configuration handed to predicates and handlers."""

    active: bool = True
    settings: ChatSettings = Field(default_factory=ChatSettings)
    log_level: str = "info"

    model_config = {
        "env_prefix": "CHAT_INTENTS_",
        "env_nested_delimiter": "__",
        "extra": "allow",
    }

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> ChatConfig:
        """Load config from YAML file, with env var overrides."""
        if path is None:
            path = REPO_ROOT / "config" / "chat.yml"

        values: dict[str, Any] = {}
        if path.exists():
            with open(path) as f:
                values = yaml.safe_load(f) or {}

        return cls(**_drop_nulls(values))

    @classmethod
    def coerce(cls, value: ChatConfig | Mapping[str, Any] | None) -> ChatConfig:
        """Accept a ready config, a raw mapping, or nothing."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            return cls()
        try:
            return cls(**_drop_nulls(value))
        except ValidationError as e:
            logger.warning("Invalid chat config, using defaults: %s", e)
            return cls()


def configure_logging(config: ChatConfig) -> None:
    """Apply the configured log level to the root logger."""
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
