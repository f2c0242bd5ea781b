"""Tests for TUI command router."""

import json
from unittest.mock import MagicMock

import pytest

from codebuddy import messages
from codebuddy.tui.shell import BuddyShell


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "app.py"
    path.write_text("a = 1\nb = 2\nc = 3\n", encoding="utf-8")
    return path


@pytest.fixture
def shell(tmp_path):
    return BuddyShell(config_dir=tmp_path / "cfg", input_fn=lambda prompt: "")


def test_route_help_returns_command_list(shell):
    result = shell.router.route("/help")

    assert result["status"] == "success"
    assert "prompts" in result["data"]["commands"]
    assert "/run" in result["data"]["help_text"]


def test_route_empty_returns_error(shell):
    result = shell.router.route("/")
    assert result["status"] == "error"
    assert "Empty command" in result["message"]


def test_route_unknown_command_returns_error(shell):
    result = shell.router.route("/nonexistent")
    assert result["status"] == "error"
    assert "Unknown command" in result["message"]
    assert "/help" in result["message"]


def test_route_parse_error_returns_error(shell):
    result = shell.router.route('/add "unterminated')
    assert result["status"] == "error"
    assert "Parse error:" in result["message"]


def test_open_binds_editor_with_selection(shell, source):
    result = shell.router.route(f"/open {source} 2-3")

    assert result["status"] == "success"
    assert shell.editor.capture() == "b = 2\nc = 3\n"
    assert shell.state.editor_label == "app.py:2-3"


def test_open_missing_file_is_an_error(shell, tmp_path):
    result = shell.router.route(f"/open {tmp_path / 'nope.py'}")
    assert result["status"] == "error"
    assert shell.editor is None


def test_open_twice_keeps_one_conversation(shell, source, tmp_path):
    other = tmp_path / "other.py"
    other.write_text("x = 0\n", encoding="utf-8")

    shell.router.route(f"/open {source}")
    panel = shell.panel
    shell.router.route(f"/open {other}")

    assert shell.panel is panel
    assert shell.editor.path == other.resolve()


def test_select_requires_open_editor(shell):
    assert shell.router.route("/select 1-2")["status"] == "error"


def test_select_changes_and_clears_selection(shell, source):
    shell.router.route(f"/open {source}")

    shell.router.route("/select 3")
    assert shell.editor.capture() == "c = 3\n"

    shell.router.route("/select all")
    assert shell.editor.capture() == "a = 1\nb = 2\nc = 3\n"


def test_add_edit_delete_round(shell):
    added = shell.router.route('/add Explain "Explain this code"')
    assert added["status"] == "success"
    template_id = added["data"]["template"]["id"]
    assert shell.state.template_count == 1

    answers = iter(["Explain!", "Explain this code simply"])
    shell.input_fn = lambda prompt: next(answers)
    edited = shell.router.route(f"/edit {template_id}")
    assert edited["status"] == "success"
    assert shell.store.get(template_id).label == "Explain!"
    assert shell.store.get(template_id).prompt == "Explain this code simply"

    deleted = shell.router.route(f"/delete {template_id}")
    assert deleted["status"] == "success"
    assert shell.store.list() == []
    assert shell.state.template_count == 0


def test_add_prompts_for_missing_values(shell):
    answers = iter(["Tests", "Write unit tests"])
    shell.input_fn = lambda prompt: next(answers)
    result = shell.router.route("/add")
    assert result["status"] == "success"
    assert shell.store.list()[0].prompt == "Write unit tests"


def test_add_cancelled_on_empty_label(shell):
    result = shell.router.route("/add")
    assert result["status"] == "info"
    assert shell.store.list() == []


def test_edit_and_delete_unknown_id_report_not_found(shell):
    assert "Template not found" in shell.router.route("/edit 123")["message"]
    assert "Template not found" in shell.router.route("/delete 123")["message"]


def test_run_posts_execute_prompt_and_submits(shell, source):
    template = shell.store.add("Explain", "Explain this code")
    shell.router.route(f"/open {source}")
    shell.panel.handle_message = MagicMock()
    shell.view.post_message = shell.panel.handle_message

    result = shell.router.route(f"/run {template.id}")

    assert result["status"] == "info"
    shell.panel.handle_message.assert_called_once_with(messages.submit_prompt("Explain this code"))


def test_run_without_editor_is_an_error(shell):
    template = shell.store.add("Explain", "Explain this code")
    result = shell.router.route(f"/run {template.id}")
    assert result["status"] == "error"
    assert "open a code file" in result["message"]


def test_export_and_import(shell, tmp_path):
    shell.store.add("Explain", "Explain this code")
    target = tmp_path / "out.json"

    exported = shell.router.route(f"/export {target}")
    assert exported["status"] == "success"
    assert json.loads(target.read_text(encoding="utf-8"))[0]["label"] == "Explain"

    replacement = tmp_path / "in.json"
    replacement.write_text('[{"id": "1", "label": "New", "prompt": "P"}]', encoding="utf-8")
    imported = shell.router.route(f"/import {replacement}")
    assert imported["status"] == "success"
    assert [t.label for t in shell.store.list()] == ["New"]


def test_export_empty_library_is_an_error(shell, tmp_path):
    result = shell.router.route(f"/export {tmp_path / 'out.json'}")
    assert result["status"] == "error"
    assert not (tmp_path / "out.json").exists()


def test_import_bad_file_keeps_library(shell, tmp_path):
    shell.store.add("Keep", "me")
    bad = tmp_path / "bad.json"
    bad.write_text('[{"id":"1","label":"x"}]', encoding="utf-8")

    result = shell.router.route(f"/import {bad}")

    assert result["status"] == "error"
    assert [t.label for t in shell.store.list()] == ["Keep"]


def test_apply_writes_last_code_block(shell, source):
    shell.router.route(f"/open {source}")
    shell.view.receive(messages.add_response("Here:\n```python\nz = 26\n```\n"))

    result = shell.router.route("/apply")

    assert result["status"] == "info"
    assert source.read_text(encoding="utf-8") == "z = 26\n"


def test_apply_without_code_block_is_an_error(shell, source):
    shell.router.route(f"/open {source}")
    assert shell.router.route("/apply")["status"] == "error"


def test_status_reports_usage(shell):
    result = shell.router.route("/status")
    assert result["status"] == "success"
    assert "Gemini: 0 calls" in result["data"]["detail"]


def test_quit_and_exit(shell):
    assert shell.router.route("/quit")["status"] == "exit"
    assert shell.router.route("/exit")["status"] == "exit"
