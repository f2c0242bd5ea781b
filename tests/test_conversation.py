"""Tests for the conversation controller and the single-panel registry."""

from unittest.mock import MagicMock

import pytest

from codebuddy import messages
from codebuddy.editor import EditorContext
from codebuddy.errors import ConfigurationError, RequestFailure, ValidationError
from codebuddy.tui.conversation import AWAITING_RESPONSE, IDLE, ConversationPanel, PanelRegistry


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "app.py"
    path.write_text("def add(a, b):\n    return a + b\n", encoding="utf-8")
    return path


def _panel(editor, client=None, factory=None):
    notes = []
    sent = []
    client = client or MagicMock()
    panel = ConversationPanel(
        editor,
        client_factory=factory or (lambda: client),
        notify=lambda level, text: notes.append((level, text)),
    )
    panel.bind_view(sent.append)
    return panel, client, sent, notes


def test_submit_posts_loading_then_response(source):
    client = MagicMock()
    client.model = "gemini-2.5-flash"
    client.generate.return_value = "It **adds** numbers."
    panel, _, sent, notes = _panel(EditorContext(source), client)

    panel.handle_message(messages.submit_prompt("what does this do?"))

    assert sent == [
        messages.show_loading(),
        messages.add_response("It **adds** numbers."),
    ]
    prompt = client.generate.call_args.args[0]
    assert "what does this do?" in prompt
    assert "return a + b" in prompt
    assert panel.state == IDLE
    assert notes == []


def test_submit_uses_selection_when_present(source):
    client = MagicMock()
    client.generate.return_value = "ok"
    panel, _, _, _ = _panel(EditorContext(source, (2, 2)), client)

    panel.handle_message(messages.submit_prompt("explain"))

    prompt = client.generate.call_args.args[0]
    assert "return a + b" in prompt
    assert "def add" not in prompt


def test_empty_context_reports_error_without_relay(tmp_path):
    empty = tmp_path / "empty.py"
    empty.write_text("", encoding="utf-8")
    factory = MagicMock()
    panel, _, sent, notes = _panel(EditorContext(empty), factory=factory)

    panel.handle_message(messages.submit_prompt("explain"))

    factory.assert_not_called()
    assert sent == []
    assert notes[0][0] == "error"
    assert "No code found" in notes[0][1]


def test_request_failure_posts_fallback_and_returns_to_idle(source, caplog):
    client = MagicMock()
    client.generate.side_effect = RequestFailure("Failed", detail="quota exceeded")
    panel, _, sent, notes = _panel(EditorContext(source), client)

    with caplog.at_level("ERROR"):
        panel.handle_message(messages.submit_prompt("explain"))

    assert sent[-1] == messages.add_response(messages.FALLBACK_RESPONSE)
    assert panel.state == IDLE
    assert notes[0][0] == "error"
    assert "quota exceeded" in caplog.text


def test_missing_key_is_reported_and_conversation_recovers(source):
    def factory():
        raise ConfigurationError("Gemini API key not found.")

    panel, _, sent, notes = _panel(EditorContext(source), factory=factory)

    panel.handle_message(messages.submit_prompt("explain"))

    assert sent == [messages.show_loading(), messages.add_response(messages.FALLBACK_RESPONSE)]
    assert notes == [("error", "Gemini API key not found.")]
    assert panel.state == IDLE


def test_unexpected_codebuddy_error_posts_fallback(source, caplog):
    def factory():
        raise ValidationError("Invalid config file config.yaml: expected a mapping")

    panel, _, sent, notes = _panel(EditorContext(source), factory=factory)

    with caplog.at_level("ERROR"):
        panel.handle_message(messages.submit_prompt("explain"))

    assert sent == [messages.show_loading(), messages.add_response(messages.FALLBACK_RESPONSE)]
    assert notes == [("error", "Invalid config file config.yaml: expected a mapping")]
    assert panel.state == IDLE
    assert "Invalid config file" in caplog.text


def test_unreadable_editor_is_reported_without_relay(source):
    editor = EditorContext(source)
    editor.capture = MagicMock(side_effect=PermissionError("permission denied"))
    factory = MagicMock()
    panel, _, sent, notes = _panel(editor, factory=factory)

    panel.handle_message(messages.submit_prompt("explain"))

    factory.assert_not_called()
    assert sent == []
    assert notes[0][0] == "error"
    assert "permission denied" in notes[0][1]
    assert panel.state == IDLE


def test_second_submit_while_awaiting_is_rejected(source):
    client = MagicMock()
    panel, _, sent, notes = _panel(EditorContext(source), client)
    panel.state = AWAITING_RESPONSE

    panel.handle_message(messages.submit_prompt("again"))

    client.generate.assert_not_called()
    assert sent == []
    assert notes and notes[0][0] == "error"


def test_apply_code_writes_into_editor(source):
    panel, _, _, notes = _panel(EditorContext(source))

    panel.handle_message(messages.apply_code("x = 1\n"))

    assert source.read_text(encoding="utf-8") == "x = 1\n"
    assert notes[0][0] == "info"


def test_malformed_message_is_dropped(source):
    panel, client, sent, notes = _panel(EditorContext(source))

    panel.handle_message({"command": "rm -rf"})

    assert sent == []
    assert notes[0][0] == "error"


def test_prompt_from_library_posts_execute_prompt(source):
    panel, _, sent, _ = _panel(EditorContext(source))
    panel.handle_prompt_from_library("Explain this code")
    assert sent == [messages.execute_prompt("Explain this code")]


def test_messages_queue_until_a_view_is_bound(source):
    panel = ConversationPanel(EditorContext(source), client_factory=MagicMock(), notify=lambda *a: None)
    panel.handle_prompt_from_library("queued")

    received = []
    panel.bind_view(received.append)

    assert received == [messages.execute_prompt("queued")]


def test_registry_reuses_panel_and_rebinds_editor(source, tmp_path):
    other = tmp_path / "other.py"
    other.write_text("y = 2\n", encoding="utf-8")
    registry = PanelRegistry()

    first = registry.create_or_show(EditorContext(source), MagicMock())
    second = registry.create_or_show(EditorContext(other), MagicMock())

    assert first is second
    assert second.editor.path == other.resolve()


def test_registry_creates_new_panel_after_dispose(source):
    registry = PanelRegistry()
    first = registry.create_or_show(EditorContext(source), MagicMock())
    registry.dispose()

    assert first.disposed
    assert registry.current is None
    assert registry.create_or_show(EditorContext(source), MagicMock()) is not first
