"""Tests for command search, the command registry and the palette presenter."""

import pytest

from jaskmoney.exceptions import (
    CommandDisabledError,
    CommandRegistrationError,
    CommandScopeError,
    UnknownCommandError,
)
from jaskmoney.ui.command_palette import palette_presenter
from jaskmoney.ui.command_palette.default_commands import build_command_registry, saved_filter_commands
from jaskmoney.ui.command_palette.fuzzy import fuzzy_match_score
from jaskmoney.ui.command_palette.palette_commands import Command, CommandOutcome, CommandRegistry
from jaskmoney.ui.command_palette.saved_filters import next_unique_filter_id, slugify_filter_id
from jaskmoney.ui.dispatch.effects import Quit, Task
from jaskmoney.ui.dispatch.state import AppState, CommandUIKind, DetailState, SavedFilter, Tab
from jaskmoney.ui.dispatch.text import TextField


def make_command(command_id, label, **kwargs):
    kwargs.setdefault("execute", lambda state: CommandOutcome(state))
    return Command(id=command_id, label=label, **kwargs)


def disabled(reason):
    return lambda state: (False, reason)


class TestFuzzyMatch:
    """Test subsequence scoring."""

    def test_empty_query_matches(self):
        assert fuzzy_match_score("anything", "") == (True, 0)

    def test_out_of_order_fails(self):
        """Characters must appear in order."""
        assert fuzzy_match_score("abc", "acb") == (False, 0)

    def test_consecutive_run(self):
        """Length plus two adjacency bonuses."""
        assert fuzzy_match_score("Go to Budget", "bud") == (True, 9)

    def test_prefix_and_exact_bonus(self):
        """Whole-label matches score highest."""
        matched, exact = fuzzy_match_score("Quit", "quit")
        _, prefix = fuzzy_match_score("Quitting", "quit")
        assert matched
        assert exact == prefix + 20

    def test_case_insensitive(self):
        assert fuzzy_match_score("SETTINGS", "set")[0]


class TestFilterIds:
    """Test saved filter id generation."""

    def test_slugify(self):
        assert slugify_filter_id("Groceries & Dining") == "groceries-dining"
        assert slugify_filter_id("big_spend-2024") == "big_spend-2024"

    def test_slugify_empty(self):
        """Names without usable characters fall back to the default id."""
        assert slugify_filter_id("   ") == "filter"
        assert slugify_filter_id("___") == "filter"

    def test_slugify_length(self):
        assert len(slugify_filter_id("a" * 100)) == 63

    def test_next_unique(self):
        """Numbered suffixes are added until the id is free."""
        assert next_unique_filter_id([], "Food") == "food"
        assert next_unique_filter_id(["food"], "Food") == "food-2"
        assert next_unique_filter_id(["food", "FOOD-2"], "food") == "food-3"

    def test_next_unique_respects_length(self):
        """Suffixed ids still fit in 63 characters."""
        base = "a" * 63
        assert next_unique_filter_id([base], base) == "a" * 61 + "-2"


class TestCommandRegistry:
    """Test registration, search and execution."""

    def test_duplicate_register_raises(self):
        registry = CommandRegistry([make_command("app:quit", "Quit")])
        with pytest.raises(CommandRegistrationError):
            registry.register(make_command("app:quit", "Quit Again"))

    def test_replace_generated_swaps_prefix(self):
        """Only commands under the prefix are replaced."""
        registry = CommandRegistry(
            [make_command("app:quit", "Quit"), make_command("filter:apply:old", "Apply Filter: Old")]
        )
        count = registry.replace_generated("filter:apply:", [make_command("filter:apply:new", "Apply Filter: New")])

        assert count == 1
        assert "app:quit" in registry
        assert "filter:apply:old" not in registry
        assert "filter:apply:new" in registry

    def test_replace_generated_checks_prefix(self):
        """Generated ids must carry the prefix."""
        registry = CommandRegistry()
        with pytest.raises(CommandRegistrationError):
            registry.replace_generated("filter:apply:", [make_command("app:quit", "Quit")])

    def test_replace_generated_rejects_duplicates(self):
        registry = CommandRegistry()
        duplicate = [make_command("filter:apply:a", "A"), make_command("filter:apply:a", "A")]
        with pytest.raises(CommandRegistrationError):
            registry.replace_generated("filter:apply:", duplicate)

    def test_search_excludes_hidden_and_out_of_scope(self):
        registry = CommandRegistry(
            [
                make_command("a", "Alpha"),
                make_command("b", "Beta", hidden=True),
                make_command("c", "Gamma", scopes=frozenset({"budget"})),
            ]
        )
        ids = [m.command.id for m in registry.search("", "transactions", AppState())]
        assert ids == ["a"]
        assert [m.command.id for m in registry.search("", "budget", AppState())] == ["a", "c"]

    def test_search_orders_enabled_then_mru(self):
        """Disabled commands sink; the last used command floats up."""
        registry = CommandRegistry(
            [
                make_command("c", "Charlie", enabled=disabled("Not now.")),
                make_command("b", "Beta"),
                make_command("a", "Alpha"),
            ]
        )
        results = registry.search("", "global", AppState())
        assert [m.command.id for m in results] == ["a", "b", "c"]
        assert results[-1].disabled_reason == "Not now."

        results = registry.search("", "global", AppState(), last_used_id="b")
        assert [m.command.id for m in results] == ["b", "a", "c"]

    def test_exact_match_ranks_first(self):
        """An exact id or label beats a longer fuzzy match."""
        registry = CommandRegistry([make_command("tag:set", "Set Tags"), make_command("tags", "Tags")])
        results = registry.search("tags", "global", AppState())
        assert results[0].command.id == "tags"

    def test_execute_unknown(self):
        with pytest.raises(UnknownCommandError):
            CommandRegistry().execute_by_id("nope", "global", AppState())

    def test_execute_out_of_scope(self):
        registry = CommandRegistry([make_command("c", "Gamma", scopes=frozenset({"budget"}))])
        with pytest.raises(CommandScopeError):
            registry.execute_by_id("c", "dashboard", AppState())

    def test_execute_disabled_message_is_reason(self):
        """The reason is shown verbatim."""
        registry = CommandRegistry([make_command("c", "Charlie", enabled=disabled("Not now."))])
        with pytest.raises(CommandDisabledError) as excinfo:
            registry.execute_by_id("c", "global", AppState())
        assert str(excinfo.value) == "Not now."

    def test_execute_returns_outcome(self):
        registry = CommandRegistry([make_command("q", "Quit", execute=lambda s: CommandOutcome(s, Quit()))])
        outcome = registry.execute_by_id("q", "global", AppState())
        assert outcome.effect == Quit()


class TestDefaultCommands:
    """Test the built-in command set."""

    def test_saved_filter_commands(self, domain):
        (command,) = saved_filter_commands([SavedFilter("food", "Food", "cat:food")], domain)
        assert command.id == "filter:apply:food"
        assert command.label == "Apply Filter: Food"
        assert command.description == "cat:food"
        assert command.category == "Filters"

    def test_apply_filter_command(self, domain, keys):
        """Running a filter command switches to transactions and queues the domain call."""
        saved = SavedFilter("food", "Food", "cat:food")
        registry = build_command_registry(domain, keys, [saved])
        outcome = registry.execute_by_id("filter:apply:food", "dashboard", AppState(saved_filters=(saved,)))

        assert outcome.state.active_tab is Tab.MANAGER
        assert outcome.state.applied_filter_id == "food"
        assert outcome.state.search_query == "cat:food"
        outcome.effect.execute()
        assert domain.calls == [("apply_saved_filter", "food", "cat:food")]

    def test_budget_unavailable(self, domain, keys):
        registry = build_command_registry(domain, keys)
        results = registry.search("budget", "dashboard", AppState(budget_available=False))
        (match,) = [m for m in results if m.command.id == "nav:budget"]
        assert not match.enabled
        assert match.disabled_reason == "Budget tab is not available yet."

    def test_rules_apply_runs_both_rule_sets(self, domain, keys):
        registry = build_command_registry(domain, keys)
        outcome = registry.execute_by_id("rules:apply", "global", AppState())

        assert isinstance(outcome.effect, Task)
        result = outcome.effect.execute()
        assert result.value == "Category rules applied. Tag rules applied."
        assert [call[0] for call in domain.calls] == ["apply_category_rules", "apply_tag_rules"]


class TestPalettePresenter:
    """Test the palette and colon command line through the dispatcher."""

    def test_open_and_run(self, press):
        """Typing a query and pressing enter runs the best match."""
        state, effects = press(AppState(), "ctrl+k", "q", "u", "i", "t", "enter")

        assert effects == [Quit()]
        assert state.command_ui is None
        assert state.last_command_id == "app:quit"

    def test_palette_scope_is_tab_scope(self, press):
        state, _ = press(AppState(active_tab=Tab.BUDGET), "ctrl+k")
        assert state.command_ui.kind is CommandUIKind.PALETTE
        assert state.command_ui.scope == "budget"

    def test_colon_line(self, press):
        state, _ = press(AppState(), ":")
        assert state.command_ui.kind is CommandUIKind.COLON

    def test_no_match_keeps_ui_open(self, press):
        state, effects = press(AppState(), "ctrl+k", "z", "z", "z", "enter")

        assert effects == []
        assert state.command_ui is not None
        assert state.status == "No matching command."
        assert state.status_error

    def test_only_disabled_match_shows_reason(self, press):
        state, _ = press(AppState(budget_available=False), "ctrl+k", *"go to budget", "enter")
        assert state.status == "Budget tab is not available yet."
        assert state.command_ui is not None

    def test_backspace_and_escape(self, press):
        state, _ = press(AppState(), "ctrl+k", "a", "b", "backspace")
        assert state.command_ui.query == "a"

        state, _ = press(state, "esc")
        assert state.command_ui is None

    def test_letters_are_query_text(self, press):
        """j and q type into the query instead of moving or quitting."""
        state, effects = press(AppState(), "ctrl+k", "j", "q")
        assert state.command_ui.query == "jq"
        assert effects == []

    def test_cursor_moves_with_arrows(self, press):
        state, _ = press(AppState(), "ctrl+k", "down", "down", "up")
        assert state.command_ui.cursor == 1

    def test_blocked_while_detail_open(self, press):
        """The detail view owns the keyboard, so ctrl+k does nothing."""
        state, _ = press(AppState(detail=DetailState(transaction=0)), "ctrl+k")
        assert state.command_ui is None

    def test_blocked_in_filter_input(self, press):
        state, _ = press(AppState(filter_input=TextField.of("cat")), "ctrl+k")
        assert state.command_ui is None
        assert state.filter_input.value == "cat"

    def test_can_open_command_ui(self):
        assert palette_presenter.can_open_command_ui(AppState())
        assert not palette_presenter.can_open_command_ui(AppState(jump_active=True))
        assert not palette_presenter.can_open_command_ui(AppState(dash_timeframe_focus=True))

    def test_open_refused_with_error(self):
        outcome = palette_presenter.open_command_ui(AppState(dry_run_open=True), CommandUIKind.PALETTE)
        assert outcome.error == "Close the current view first."


class TestCommandScenarios:
    """End-to-end command registry behaviour."""

    def test_scope_mismatch_never_executes(self):
        """An out-of-scope command body is not called."""
        calls = []

        def execute(state):
            calls.append(state)
            return CommandOutcome(state)

        registry = CommandRegistry([make_command("c", "Gamma", scopes=frozenset({"budget"}), execute=execute)])
        with pytest.raises(CommandScopeError):
            registry.execute_by_id("c", "transactions", AppState())
        assert calls == []

    def test_disabled_budget_keeps_tab(self, domain, keys):
        registry = build_command_registry(domain, keys)
        state = AppState(budget_available=False)

        results = registry.search("", "global", state)
        (match,) = [m for m in results if m.command.id == "nav:budget"]
        assert match.disabled_reason == "Budget tab is not available yet."

        with pytest.raises(CommandDisabledError) as excinfo:
            registry.execute_by_id("nav:budget", "global", state)
        assert "Budget tab is not available yet." in str(excinfo.value)
        assert state.active_tab is Tab.DASHBOARD

    def test_saved_filters_independent_after_rename(self, domain, keys):
        """Rebuilding after an id change leaves no stale command."""
        groceries = SavedFilter("groceries", "Groceries", "cat:groceries")
        rent = SavedFilter("rent", "Rent", "cat:rent")
        registry = build_command_registry(domain, keys, [groceries, rent])

        for saved in (groceries, rent):
            outcome = registry.execute_by_id(f"filter:apply:{saved.id}", "global", AppState())
            assert outcome.state.applied_filter_id == saved.id

        renamed = SavedFilter("food", "Groceries", "cat:groceries")
        registry.replace_generated("filter:apply:", saved_filter_commands([renamed, rent], domain))
        ids = [c.id for c in registry.get_all() if c.id.startswith("filter:apply:")]
        assert sorted(ids) == ["filter:apply:food", "filter:apply:rent"]


class TestRecentCommand:
    """Test the most-recently-used bias in ranking."""

    def test_recent_beats_higher_score(self):
        """The last used command leads even when another match scores higher."""
        registry = CommandRegistry([make_command("budget", "Budget"), make_command("nav", "Go to Budget")])
        ranked = registry.search("budget", "global", AppState())
        assert [m.command.id for m in ranked] == ["budget", "nav"]
        assert ranked[0].score > ranked[1].score

        ranked = registry.search("budget", "global", AppState(), last_used_id="nav")
        assert [m.command.id for m in ranked] == ["nav", "budget"]

    def test_recent_disabled_stays_below_enabled(self):
        registry = CommandRegistry(
            [make_command("budget", "Budget"), make_command("nav", "Go to Budget", enabled=disabled("Not now."))]
        )
        ranked = registry.search("budget", "global", AppState(), last_used_id="nav")
        assert [m.command.id for m in ranked] == ["budget", "nav"]

    def test_repeated_saved_filter_id(self, domain):
        filters = [SavedFilter("food", "Food", "cat:food"), SavedFilter("food", "Dining", "cat:dining")]
        (command,) = saved_filter_commands(filters, domain)
        assert command.label == "Apply Filter: Food"

    def test_reload_command_queues_task(self, domain, keys):
        registry = build_command_registry(domain, keys)
        outcome = registry.execute_by_id("settings:reload-keybindings", "global", AppState())
        assert outcome.state.status == "Reloading keybindings..."
        assert isinstance(outcome.effect, Task)
