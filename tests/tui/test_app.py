import json

import pytest
from textual.widgets.text_area import Selection

from snipflow.config import SnippetsConfig
from snipflow.presentation.tui import SnipflowApp
from snipflow.presentation.tui.app import detect_filetype
from snipflow.presentation.widgets import CompletionMenu, SnippetTextArea


@pytest.fixture
def config(tmp_path):
    snippets = tmp_path / "snippets"
    snippets.mkdir()
    (snippets / "python.json").write_text(
        json.dumps(
            {
                "For range": {"prefix": "fori", "body": "for ${1:i} in range($2):\n    $0"},
                "If": {"prefix": "iff", "body": "if $1:\n    $VISUAL"},
                "Pass": {"prefix": "pas", "body": "pass"},
            }
        ),
        encoding="utf-8",
    )
    return SnippetsConfig(snippet_dirs=[str(snippets)], mru_dir=str(tmp_path / "mru"))


def test_detect_filetype(tmp_path):
    assert detect_filetype(tmp_path / "a.py") == "python"
    assert detect_filetype(tmp_path / "a.lua") == "lua"
    assert detect_filetype(None) == "text"


@pytest.mark.asyncio
async def test_tab_expands_and_jumps(config):
    app = SnipflowApp(config=config, filetype="python")

    async with app.run_test() as pilot:
        await pilot.pause()
        editor = app.query_one("#editor", SnippetTextArea)
        editor.load_text("fori")
        editor.cursor_location = (0, 4)

        await pilot.press("tab")
        await app.workers.wait_for_complete()
        await pilot.pause()

        assert editor.text == "for i in range():\n    "
        assert editor.selected_text == "i"

        await pilot.press("tab")
        await app.workers.wait_for_complete()
        await pilot.pause()

        assert editor.cursor_location == (0, 15)


@pytest.mark.asyncio
async def test_capture_then_expand_uses_selection(config):
    app = SnipflowApp(config=config, filetype="python")

    async with app.run_test() as pilot:
        await pilot.pause()
        editor = app.query_one("#editor", SnippetTextArea)
        editor.load_text("    call()\n")
        editor.selection = Selection((0, 0), (0, 10))

        assert await app.host.mode() == "V"
        await app.extension.commands.capture_selection()
        assert app.state.selected_text == "call()"
        assert editor.text == "    \n"

        editor.insert("iff", (0, 4))
        editor.cursor_location = (0, 7)
        await app.extension.commands.expand()
        await pilot.pause()

        assert editor.text == "    if :\n        call()\n"


@pytest.mark.asyncio
async def test_no_match_opens_completion_menu(config):
    app = SnipflowApp(config=config, filetype="python")

    async with app.run_test() as pilot:
        await pilot.pause()
        editor = app.query_one("#editor", SnippetTextArea)
        editor.load_text("fo")
        editor.cursor_location = (0, 2)

        await app.extension.commands.expand()
        await pilot.pause()

        menu = app.query_one("#completion-menu", CompletionMenu)
        assert menu.visible
        assert [item.label for item in menu.items] == ["fori"]


@pytest.mark.asyncio
async def test_new_expansion_ends_previous_placeholder_session(config):
    app = SnipflowApp(config=config, filetype="python")

    async with app.run_test() as pilot:
        await pilot.pause()
        editor = app.query_one("#editor", SnippetTextArea)
        editor.load_text("fori")
        editor.cursor_location = (0, 4)

        await app.extension.commands.expand()
        assert app.extension.engine.get_active_session(1) is not None

        editor.insert("pas", (1, 4))
        editor.cursor_location = (1, 7)
        await app.extension.commands.expand()
        await pilot.pause()

        assert editor.text == "for i in range():\n    pass"
        assert app.state.last_placeholder is None
        assert app.extension.engine.get_active_session(1) is None


@pytest.mark.asyncio
async def test_trigger_character_opens_completion_menu(config):
    config.trigger_characters = ["."]
    app = SnipflowApp(config=config, filetype="python")

    async with app.run_test() as pilot:
        await pilot.pause()
        editor = app.query_one("#editor", SnippetTextArea)
        editor.load_text("x")
        editor.cursor_location = (0, 1)

        await pilot.press("full_stop")
        await pilot.pause()
        await app.extension.wait_idle()
        await pilot.pause()

        menu = app.query_one("#completion-menu", CompletionMenu)
        assert editor.text == "x."
        assert menu.visible
        assert [item.label for item in menu.items] == ["fori", "iff", "pas"]


@pytest.mark.asyncio
async def test_confirmed_completion_is_recorded(config):
    app = SnipflowApp(config=config, filetype="python")

    async with app.run_test() as pilot:
        await pilot.pause()
        editor = app.query_one("#editor", SnippetTextArea)
        editor.load_text("fo")
        editor.cursor_location = (0, 2)

        await app.host.start_completion("snippets")
        await app.host.confirm_popup_entry()
        await app.extension.completion.wait_idle()
        await pilot.pause()

        assert editor.text == "for i in range():\n    "
        assert await app.extension.recency.load() == ["fori"]
