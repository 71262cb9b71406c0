"""End-to-end routing tests: keys in, state and effects out."""

from dataclasses import replace

import pytest

from jaskmoney.config.constants import RELOAD_KEYBINDINGS_TASK
from jaskmoney.ui.dispatch.dispatcher import Dispatcher
from jaskmoney.ui.dispatch.effects import ConfirmExpired, Quit, Schedule, Task, TaskResult
from jaskmoney.ui.dispatch.operations import BUDGET_UNAVAILABLE
from jaskmoney.ui.dispatch.state import (
    AppState,
    CommandUIKind,
    DetailState,
    ManagerMode,
    PickerState,
    SavedFilter,
    SettingsEditMode,
    SettingsSection,
    Tab,
)
from jaskmoney.ui.dispatch.tabs import RESET_KEYBINDINGS_TASK
from jaskmoney.ui.keybindings import KeybindingConfig, Scope


def settings_state(section, **kwargs):
    return AppState(active_tab=Tab.SETTINGS, settings_active=True, settings_section=section, **kwargs)


def run_tasks(effects):
    return [effect.execute() for effect in effects if isinstance(effect, Task)]


class TestNavigation:
    """Test tab switching and jump mode."""

    def test_number_keys_switch_tabs(self, press):
        state, _ = press(AppState(), "4")
        assert state.active_tab is Tab.SETTINGS
        state, _ = press(state, "3")
        assert state.active_tab is Tab.MANAGER

    def test_disabled_budget(self, press):
        """A disabled command reports its reason and changes nothing else."""
        state, effects = press(AppState(budget_available=False), "2")

        assert state.active_tab is Tab.DASHBOARD
        assert state.status == BUDGET_UNAVAILABLE
        assert state.status_error
        assert effects == []

    def test_tab_cycles_and_skips_budget(self, press):
        state, _ = press(AppState(budget_available=False), "tab")
        assert state.active_tab is Tab.MANAGER
        state, _ = press(state, "shift+tab")
        assert state.active_tab is Tab.DASHBOARD

    def test_jump_mode(self, press):
        state, _ = press(AppState(), "v")
        assert state.jump_active
        state, _ = press(state, "s")
        assert not state.jump_active
        assert state.active_tab is Tab.SETTINGS

    def test_jump_cancel(self, press):
        state, _ = press(AppState(), "v", "esc")
        assert not state.jump_active
        assert state.status == "Jump mode cancelled"
        assert state.active_tab is Tab.DASHBOARD

    def test_jump_unmapped_letter(self, press):
        state, _ = press(AppState(), "v", "x")
        assert not state.jump_active
        assert state.status == "No tab mapped to that key"

    def test_quit(self, press):
        _, effects = press(AppState(), "q")
        assert effects == [Quit()]

    def test_unbound_key_is_ignored(self, press):
        state, effects = press(AppState(), "F12")
        assert state == AppState()
        assert effects == []


class TestTransactions:
    """Test the transaction list and its overlays."""

    @pytest.fixture
    def txns(self):
        return AppState(
            active_tab=Tab.MANAGER,
            transaction_count=3,
            txn_cursor=1,
            categories=("Food", "Rent"),
            tags=("work", "trip"),
        )

    def test_filter_input_types_letters(self, press, txns):
        """Inside the filter line q is text, not quit."""
        state, effects = press(txns, "/", "q", "1", "enter")

        assert effects == []
        assert state.filter_input is None
        assert state.search_query == "q1"
        assert state.status == "Filter: q1"

    def test_filter_escape_clears(self, press, txns):
        state, _ = press(replace(txns, search_query="old"), "/", "esc")
        assert state.filter_input is None
        assert state.search_query == ""

    def test_filter_save_from_input(self, press, txns):
        """ctrl+s inside the filter line opens the editor prefilled."""
        state, _ = press(txns, "/", "c", "a", "t", "ctrl+s")
        assert state.filter_input is None
        assert state.filter_edit.values() == ("", "cat")

        state, _ = press(state, *"Cats", "enter")
        assert state.filter_edit is None
        assert state.saved_filters == (SavedFilter("cats", "Cats", "cat"),)

    def test_quick_category(self, press, txns, domain):
        state, _ = press(txns, "c", "down", "enter")
        assert state.category_picker is None
        assert state.status == "Setting category 'Rent'..."

    def test_quick_category_runs_domain(self, dispatcher, domain, txns):
        state = dispatcher.handle_key(txns, "c").state
        result = dispatcher.handle_key(state, "enter")
        (task,) = result.effects
        task.execute()
        assert domain.calls == [("assign_category", (1,), "Food")]

    def test_category_picker_filters(self, press, txns):
        state, _ = press(txns, "c", "r")
        assert state.category_picker.visible() == ("Rent",)

    def test_tag_picker_multi_select(self, press, txns, domain):
        selected = replace(txns, selected_transactions=frozenset({0, 2}))
        _, effects = press(selected, "t", "space", "down", "space", "enter")
        run_tasks(effects)
        assert domain.calls == [("assign_tags", (0, 2), ("trip", "work"))]

    def test_quick_offset_validates(self, press, txns):
        state, _ = press(txns, "o", "-", "5", "enter")
        assert state.status == "Offset must be greater than zero."
        assert state.quick_offset is not None

    def test_filter_opens_after_error(self, press, txns):
        """An error left on the status line does not block the next command."""
        state, _ = press(replace(txns, selected_transactions=frozenset({0, 1})), "o")
        assert state.status == "Select a single transaction to offset."
        assert state.status_error

        state, _ = press(state, "/")
        assert state.filter_input is not None
        assert not state.status_error

    def test_detail_opens_after_error(self, press, txns):
        state, _ = press(txns.with_error(BUDGET_UNAVAILABLE), "enter")
        assert state.detail is not None
        assert state.detail.transaction == 1
        assert not state.status_error

    def test_failed_command_keeps_previous_state(self, press, txns):
        """A command that fails reports its own error and leaves state as it was."""
        state, _ = press(replace(txns, categories=()).with_error("old"), "c")
        assert state.category_picker is None
        assert state.status == "No categories defined."

    def test_detail_owns_keys_over_picker(self, press, txns):
        """With two overlays open only the earlier one in precedence handles keys."""
        state = replace(
            txns,
            detail=DetailState(transaction=1),
            category_picker=PickerState(items=("Food", "Rent")),
        )
        state, _ = press(state, "down")
        assert state.detail.scroll == 1
        assert state.category_picker.cursor == 0

        state, _ = press(state, "esc")
        assert state.detail is None
        assert state.category_picker == PickerState(items=("Food", "Rent"))

    def test_quick_category_needs_rows(self, press, txns):
        state, _ = press(replace(txns, transaction_count=0), "c")
        assert state.category_picker is None
        assert state.status == "No transactions loaded."

    def test_sort_and_reverse(self, press, txns):
        state, _ = press(txns, "s")
        assert state.status == "Sort: amount"
        state, _ = press(state, "S")
        assert state.sort_ascending

    def test_jump_top_bottom(self, press, txns):
        state, _ = press(txns, "G")
        assert state.txn_cursor == 2
        state, _ = press(state, "g")
        assert state.txn_cursor == 0

    def test_cursor_and_range_highlight(self, press, txns):
        state, _ = press(txns, "shift+down")
        assert state.txn_cursor == 2
        assert state.selected_transactions == frozenset({1, 2})
        state, _ = press(state, "u")
        assert state.selected_transactions == frozenset()

    def test_detail_notes(self, press, txns, domain):
        state, effects = press(txns, "enter", "n", "h", "i", "enter")
        assert state.detail.notes is None
        run_tasks(effects)
        assert domain.calls == [("save_notes", 1, "hi")]

    def test_accounts_pane(self, press, txns):
        state, _ = press(replace(txns, accounts=("Checking", "Savings")), "a")
        assert state.manager_mode is ManagerMode.ACCOUNTS
        state, _ = press(state, "j", "space")
        assert state.account_filter == frozenset({"Savings"})
        assert state.status == "Filtering 1 account(s)"
        state, _ = press(state, "esc")
        assert state.manager_mode is ManagerMode.TRANSACTIONS


class TestDashboard:
    """Test dashboard panes and the custom timeframe."""

    def test_focus_and_mode(self, press):
        state, _ = press(AppState(), "j")
        assert state.dash_focused_section == 0
        state, _ = press(state, "]")
        assert state.status == "Mode: income"
        state, _ = press(state, "esc")
        assert state.dash_focused_section == -1

    def test_pick_preset_timeframe(self, press):
        state, _ = press(AppState(), "f")
        assert state.status == "Select a timeframe."
        state, _ = press(state, "l", "enter")
        assert state.dash_timeframe == 1
        assert not state.dash_timeframe_focus
        assert state.status == "Dashboard timeframe: last month"

    def test_custom_timeframe(self, press):
        state, _ = press(AppState(), "f", "e")
        assert state.status == "Custom timeframe: enter start date (YYYY-MM-DD)."

        state, _ = press(state, *"2024-01-01", "enter")
        assert state.status == "Custom timeframe: enter end date (YYYY-MM-DD)."

        state, _ = press(state, *"2024-01-31", "enter")
        assert state.status == "Dashboard timeframe: 2024-01-01 to 2024-01-31"
        assert state.dash_timeframe == 4
        assert state.dash_custom_input is None
        assert not state.dash_timeframe_focus

    def test_custom_timeframe_rejects_bad_dates(self, press):
        state, _ = press(AppState(), "f", "e", *"2024-13-01", "enter")
        assert state.status == "Invalid date. Use YYYY-MM-DD."

        state, _ = press(AppState(), "f", "e", *"2024-02-01", "enter", *"2024-01-01", "enter")
        assert state.status == "End date must be on or after start date."

    def test_custom_timeframe_cancel(self, press):
        state, _ = press(AppState(), "f", "e", "esc")
        assert state.dash_custom_input is None
        assert state.status == "Custom timeframe cancelled."


class TestSettings:
    """Test settings navigation, lists and the DB/import section."""

    def test_nav_and_activate(self, press):
        state, _ = press(AppState(active_tab=Tab.SETTINGS), "j", "enter")
        assert state.settings_section is SettingsSection.TAGS
        assert state.settings_active

    def test_add_category(self, press, domain):
        state = settings_state(SettingsSection.CATEGORIES, categories=("Food",))
        state, effects = press(state, "a", *"Rent", "enter")

        assert state.settings_edit_mode is None
        assert state.categories == ("Food", "Rent")
        assert state.status == "Saving category 'Rent'..."
        run_tasks(effects)
        assert domain.calls == [("save_entity", "category", {"name": "Rent", "previous": ""})]

    def test_category_name_may_contain_navigation_letters(self, press):
        state = settings_state(SettingsSection.CATEGORIES)
        state, _ = press(state, "a", *"jkq", "enter")
        assert state.categories == ("jkq",)

    def test_duplicate_and_empty_names(self, press):
        state = settings_state(SettingsSection.CATEGORIES, categories=("Food",))
        state, _ = press(state, "a", "enter")
        assert state.status == "Name cannot be empty."
        state, _ = press(state, *"food", "enter")
        assert state.status == "Category 'food' already exists."
        assert state.settings_edit_mode is SettingsEditMode.ADD_CATEGORY

    def test_rename_tag(self, press):
        state = settings_state(SettingsSection.TAGS, tags=("trip",))
        state, _ = press(state, "enter", "backspace", "backspace", *"ps", "enter")
        assert state.tags == ("trps",)

    def test_delete_needs_second_press(self, press):
        state = settings_state(SettingsSection.TAGS, tags=("trip",))
        state, effects = press(state, "del")
        assert state.confirm is not None
        assert isinstance(effects[0], Schedule)

        state, _ = press(state, "x")
        assert state.confirm is None
        assert state.tags == ("trip",)
        assert state.status == "Cancelled."

    def test_rows_per_page(self, press):
        state, _ = press(settings_state(SettingsSection.DB_IMPORT), "+")
        assert state.rows_per_page == 25
        assert state.status == "Rows per page: 25"

        state, _ = press(replace(state, rows_per_page=100), "=")
        assert state.rows_per_page == 100
        state, _ = press(replace(state, rows_per_page=5), "-")
        assert state.rows_per_page == 5

    def test_command_default(self, press):
        state, _ = press(settings_state(SettingsSection.DB_IMPORT), "o")
        assert state.command_default is CommandUIKind.COLON
        assert state.status == "Command default: Colon"

    def test_clear_db(self, press, domain):
        state, effects = press(settings_state(SettingsSection.DB_IMPORT), "c", "c")
        run_tasks(effects)
        assert domain.calls == [("clear_database",)]

    def test_reset_keybindings(self, dispatcher):
        state = settings_state(SettingsSection.DB_IMPORT)
        result = dispatcher.handle_key(state, "r")
        (task,) = result.effects
        assert task.label == RESET_KEYBINDINGS_TASK

        state = dispatcher.handle_message(result.state, task.execute()).state
        assert state.status == "Keybindings reset to defaults."

    def test_reset_keybindings_rewrites_file(self, tmp_path, domain):
        path = tmp_path / "kb.yaml"
        path.write_text("version: 2\nbindings:\n  transactions:\n    sort: [x]\n")
        dispatcher = Dispatcher.create(domain, keybinding_config=KeybindingConfig(path))
        assert dispatcher.keys.lookup("x", Scope.TRANSACTIONS) is not None

        result = dispatcher.handle_key(settings_state(SettingsSection.DB_IMPORT), "r")
        dispatcher.handle_message(result.state, result.effects[0].execute())

        assert "sort: [s]" in path.read_text()
        assert dispatcher.keys.lookup("x", Scope.TRANSACTIONS) is None

    def test_week_boundary(self, press):
        state, _ = press(settings_state(SettingsSection.CHART), "l")
        assert state.week_starts_monday
        assert state.status == "Spending tracker week boundary: Monday"

    def test_rule_reorder(self, press):
        state = settings_state(SettingsSection.RULES, rules=("a", "b"))
        state, _ = press(state, "J")
        assert state.rules == ("b", "a")
        assert state.settings_cursor == 1


class TestSavedFilterCommands:
    """Test that generated commands follow the filter list."""

    @pytest.fixture
    def groceries(self):
        return SavedFilter("groceries", "Groceries", "cat:food")

    def test_rename_updates_label(self, keys, domain, groceries):
        dispatcher = Dispatcher(keys, domain=domain, saved_filters=[groceries])
        assert dispatcher.commands.get("filter:apply:groceries").label == "Apply Filter: Groceries"

        state = settings_state(SettingsSection.FILTERS, saved_filters=(groceries,))
        for key in ["enter"] + ["backspace"] * len("Groceries") + list("Food") + ["enter"]:
            state = dispatcher.handle_key(state, key).state

        assert state.saved_filters == (SavedFilter("groceries", "Food", "cat:food"),)
        assert dispatcher.commands.get("filter:apply:groceries").label == "Apply Filter: Food"

    def test_delete_removes_command(self, keys, domain, groceries):
        dispatcher = Dispatcher(keys, domain=domain, saved_filters=[groceries])
        state = settings_state(SettingsSection.FILTERS, saved_filters=(groceries,))
        for key in ("del", "del"):
            state = dispatcher.handle_key(state, key).state

        assert state.saved_filters == ()
        assert "filter:apply:groceries" not in dispatcher.commands

    def test_new_filter_gets_command(self, dispatcher):
        state = settings_state(SettingsSection.FILTERS)
        for key in ["a", *"Big", "tab", *"amount>100", "enter"]:
            state = dispatcher.handle_key(state, key).state

        assert dispatcher.commands.get("filter:apply:big").description == "amount>100"

    def test_repeated_filter_id_keeps_first(self, dispatcher):
        """A filter list with a repeated id still yields one command per id."""
        filters = (SavedFilter("food", "Food", "cat:food"), SavedFilter("food", "Dining", "cat:dining"))
        state = dispatcher.handle_key(AppState(saved_filters=filters), "F12").state

        assert state.saved_filters == filters
        assert dispatcher.commands.get("filter:apply:food").label == "Apply Filter: Food"


class TestMessages:
    """Test asynchronous results."""

    def test_task_value_becomes_status(self, dispatcher):
        state = dispatcher.handle_message(AppState(), TaskResult("import", value="Imported 3 rows.")).state
        assert state.status == "Imported 3 rows."
        assert not state.status_error

    def test_task_error(self, dispatcher):
        state = dispatcher.handle_message(AppState(), TaskResult("import", error="disk full")).state
        assert state.status == "import failed: disk full"
        assert state.status_error

    def test_failed_task_result(self):
        def boom():
            raise RuntimeError("nope")

        assert Task("x", boom).execute() == TaskResult("x", error="nope")

    def test_confirm_expired(self, press, dispatcher):
        state, (schedule,) = press(settings_state(SettingsSection.DB_IMPORT), "c")
        state = dispatcher.handle_message(state, schedule.message).state
        assert state.confirm is None

    def test_stale_expiry_ignored(self, press, dispatcher):
        state, _ = press(settings_state(SettingsSection.DB_IMPORT), "c")
        assert dispatcher.handle_message(state, ConfirmExpired(99)).state is state


class TestReload:
    """Test reloading the keybindings file at runtime."""

    def test_without_config(self, dispatcher):
        assert dispatcher.reload_keybindings() is None

    def test_reload_applies_file(self, tmp_path, domain):
        path = tmp_path / "kb.yaml"
        dispatcher = Dispatcher.create(domain, keybinding_config=KeybindingConfig(path))
        path.write_text("version: 2\nbindings:\n  dashboard:\n    dashboard_timeframe: [T]\n")

        report = dispatcher.reload_keybindings()
        assert report.applied == 1
        assert dispatcher.footer(AppState()) == [("T", "timeframe")]

    def test_rejected_file_keeps_current_bindings(self, tmp_path, domain):
        path = tmp_path / "kb.yaml"
        path.write_text("version: 2\nbindings:\n  transactions:\n    sort: [x]\n")
        dispatcher = Dispatcher.create(domain, keybinding_config=KeybindingConfig(path))

        path.write_text("version: 2\nbindings:\n  transactions:\n    sort: [c]\n")
        report = dispatcher.reload_keybindings()

        assert report.rejected
        assert dispatcher.keys.lookup("x", Scope.TRANSACTIONS).action.value == "sort"

    def test_reload_command(self, tmp_path, domain):
        """The palette command reloads the file once its task reports back."""
        path = tmp_path / "kb.yaml"
        dispatcher = Dispatcher.create(domain, keybinding_config=KeybindingConfig(path))
        path.write_text("version: 2\nbindings:\n  dashboard:\n    dashboard_timeframe: [T]\n")

        state = AppState()
        for key in ["ctrl+k", *"reload", "enter"]:
            result = dispatcher.handle_key(state, key)
            state = result.state
        (task,) = result.effects
        assert task.label == RELOAD_KEYBINDINGS_TASK

        state = dispatcher.handle_message(state, task.execute()).state
        assert state.status == "Keybindings reloaded (1 overrides)."
        assert dispatcher.footer(state) == [("T", "timeframe")]

    def test_reload_command_without_file(self, dispatcher):
        state = dispatcher.handle_message(AppState(), TaskResult(RELOAD_KEYBINDINGS_TASK)).state
        assert state.status == "No keybindings file in use."
        assert state.status_error

    def test_reload_command_rejected(self, tmp_path, domain):
        path = tmp_path / "kb.yaml"
        dispatcher = Dispatcher.create(domain, keybinding_config=KeybindingConfig(path))
        path.write_text("version: 2\nbindings:\n  transactions:\n    sort: [c]\n")

        state = dispatcher.handle_message(AppState(), TaskResult(RELOAD_KEYBINDINGS_TASK)).state
        assert state.status.startswith("Keybindings file rejected:")
        assert state.status_error
        assert dispatcher.keys.lookup("s", Scope.TRANSACTIONS).action.value == "sort"
