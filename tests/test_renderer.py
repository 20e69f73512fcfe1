"""Tests for the render pass — context binding, handler invocation, failures."""

from unittest.mock import MagicMock

from chat_intents.context import use_message_context, use_message_context_optional
from chat_intents.plugins import Plugin
from chat_intents.renderer import MessageRenderer, RenderedIntent, render_message
from chat_intents.rules import RuleOptions
from tests.conftest import webchat


class TestRenderMessage:
    def test_text(self, make_message):
        rendered = render_message(make_message(text="Hello world"))
        assert len(rendered) == 1
        assert rendered[0].name == "Text"
        assert rendered[0].output["text"] == "Hello world"

    def test_raw_payload(self):
        rendered = render_message({"source": "bot", "data": webchat({"text": "hi"})}, {}, [])
        assert [r.name for r in rendered] == ["Text"]

    def test_null_config_section(self, make_message):
        rendered = render_message(make_message(text="hi"), {"settings": {"layout": None}})
        assert [r.name for r in rendered] == ["Text"]

    def test_nothing_to_render(self, make_message):
        assert render_message(make_message(text="")) == []

    def test_context_unbound_afterwards(self, make_message):
        render_message(make_message(text="hi"))
        assert use_message_context_optional() is None


class TestPlugins:
    def test_override_handler_invoked(self, make_message):
        def custom_image():
            ctx = use_message_context()
            return {"custom": True, "trace": ctx.message.trace_id}

        message = make_message(
            data=webchat({"attachment": {"type": "image", "payload": {"url": "a.png"}}})
        )
        plugin = Plugin(name="Image", match=lambda m, c: True, handler=custom_image)

        rendered = render_message(message, plugins=[plugin])

        assert rendered == [RenderedIntent("Image", {"custom": True, "trace": "trace-1"})]

    def test_structured_handler_passed_through(self, make_message):
        component = {"name": "CustomCard"}
        plugin = {"name": "Card", "match": lambda m, c: True, "handler": component}
        rendered = render_message(make_message(text=""), plugins=[plugin])
        assert rendered[0].output is component

    def test_passthrough_renders_both(self, make_message):
        plugins = [
            {
                "name": "Text",
                "match": lambda m, c: True,
                "handler": lambda: "text",
                "options": {"passthrough": True, "fullwidth": True},
            },
            {"name": "Footer", "match": lambda m, c: True, "handler": lambda: "footer"},
        ]
        rendered = render_message(make_message(text="hi"), plugins=plugins)
        assert [(r.name, r.output) for r in rendered] == [("Text", "text"), ("Footer", "footer")]
        assert rendered[0].options == RuleOptions(passthrough=True, fullwidth=True)


class TestCallbacks:
    def test_handler_sends_action(self, make_message):
        action = MagicMock()
        on_analytics = MagicMock()

        def button():
            ctx = use_message_context()
            ctx.send("Yes", {"choice": "yes"})
            ctx.emit_analytics("postback", {"label": "Yes"})
            return "button"

        plugin = Plugin(name="Text", match=lambda m, c: True, handler=button)
        render_message(
            make_message(text="hi"), plugins=[plugin], action=action, on_analytics=on_analytics
        )

        action.assert_called_once_with("Yes", {"choice": "yes"}, None)
        on_analytics.assert_called_once_with("postback", {"label": "Yes"})

    def test_config_visible_to_handlers(self, make_message):
        seen = []

        def handler():
            seen.append(use_message_context().config.settings.layout.title)

        plugin = Plugin(name="Text", match=lambda m, c: True, handler=handler)
        render_message(make_message(text="hi"), {"settings": {"layout": {"title": "Support"}}}, [plugin])
        assert seen == ["Support"]


class TestFailures:
    def test_failing_handler_dropped(self, make_message, caplog):
        def broken():
            raise RuntimeError("boom")

        plugins = [
            {
                "name": "Text",
                "match": lambda m, c: True,
                "handler": broken,
                "options": {"passthrough": True},
            },
            {"name": "After", "match": lambda m, c: True, "handler": lambda: "after"},
        ]
        rendered = render_message(make_message(text="hi"), plugins=plugins)

        assert [r.name for r in rendered] == ["After"]
        assert "boom" in caplog.text

    def test_bad_message_does_not_stop_siblings(self, make_message):
        renderer = MessageRenderer()
        results = renderer.render_all(
            [
                make_message(data={"_cognigy": "garbage"}),
                make_message(text="second"),
            ]
        )
        assert results[0] == []
        assert results[1][0].output["text"] == "second"


class TestMessageRenderer:
    def test_plan(self, make_message):
        renderer = MessageRenderer()
        plan = renderer.plan(make_message(text="hi"))
        assert [step.name for step in plan] == ["Text"]

    def test_reusable(self, make_message):
        renderer = MessageRenderer()
        first = renderer.render(make_message(text="one"))
        second = renderer.render(make_message(text="two"))
        assert first[0].output["text"] == "one"
        assert second[0].output["text"] == "two"

    def test_custom_builtin_table(self, make_message):
        renderer = MessageRenderer(builtin_handlers={"Text": lambda: "plain"})
        assert renderer.render(make_message(text="hi"))[0].output == "plain"
