"""Tests for the Textual host around the dispatcher."""

import pytest
from textual import events

from jaskmoney.ui.dispatch.dispatcher import Dispatcher
from jaskmoney.ui.dispatch.effects import LoggingDomain
from jaskmoney.ui.dispatch.state import AppState, CommandUIState, Tab
from jaskmoney.ui.dispatch.text import TextField
from jaskmoney.ui.keybindings import build_default_registry
from jaskmoney.ui.router_app import RouterApp, render_body, render_footer_text, textual_key_name


def make_dispatcher() -> Dispatcher:
    return Dispatcher(build_default_registry(), domain=LoggingDomain())


class TestKeyNames:
    """Test translation of Textual key events."""

    def test_aliases(self):
        assert textual_key_name(events.Key("escape", None)) == "esc"
        assert textual_key_name(events.Key("delete", None)) == "del"
        assert textual_key_name(events.Key("back_tab", None)) == "shift+tab"

    def test_printable_uses_character(self):
        """Punctuation arrives under a long name but binds by its character."""
        assert textual_key_name(events.Key("colon", ":")) == ":"
        assert textual_key_name(events.Key("G", "G")) == "G"

    def test_space(self):
        assert textual_key_name(events.Key("space", " ")) == "space"

    def test_modifiers(self):
        assert textual_key_name(events.Key("ctrl+k", None)) == "ctrl+k"


class TestRendering:
    """Test the plain text view."""

    def test_body_marks_active_tab(self):
        body = render_body(AppState(active_tab=Tab.BUDGET), make_dispatcher())
        lines = body.splitlines()
        assert lines[0] == "dashboard  [budget]  manager  settings"
        assert lines[1] == "scope: budget"

    def test_body_shows_palette(self):
        state = AppState(command_ui=CommandUIState(query="quit"))
        lines = render_body(state, make_dispatcher()).splitlines()
        assert lines[1] == "scope: command_palette"
        assert lines[2] == "> quit"
        assert lines[3] == "> Quit"

    def test_body_shows_filter_input(self):
        body = render_body(AppState(filter_input=TextField()), make_dispatcher())
        assert body.splitlines()[-1].startswith("/")

    def test_footer_text(self):
        assert render_footer_text([("enter", "run"), ("esc", "close")]) == "enter run  esc close"
        assert render_footer_text([]) == ""


class TestRouterApp:
    """Drive the app with the Textual pilot."""

    @pytest.mark.asyncio
    async def test_number_switches_tab(self):
        app = RouterApp(make_dispatcher())
        async with app.run_test() as pilot:
            await pilot.press("4")
            assert app.state.active_tab is Tab.SETTINGS

    @pytest.mark.asyncio
    async def test_palette_opens_and_types(self):
        app = RouterApp(make_dispatcher())
        async with app.run_test() as pilot:
            await pilot.press("ctrl+k", "j")
            assert app.state.command_ui is not None
            assert app.state.command_ui.query == "j"
            assert app.state.active_tab is Tab.DASHBOARD

    @pytest.mark.asyncio
    async def test_task_result_reaches_status(self):
        """Domain work runs off the event loop and its message is delivered back."""
        domain = LoggingDomain()
        app = RouterApp(Dispatcher(build_default_registry(), domain=domain))
        async with app.run_test() as pilot:
            await pilot.press(":", *"applyall", "enter")
            await app.workers.wait_for_complete()
            await pilot.pause()
            assert [call[0] for call in domain.calls] == ["apply_category_rules", "apply_tag_rules"]
            assert app.state.status == "Category rules applied. Tag rules applied."
