"""Tests for two-press confirmation of destructive settings actions."""

from dataclasses import replace

from jaskmoney.ui.dispatch import confirm
from jaskmoney.ui.dispatch.effects import ConfirmExpired, Schedule, Task
from jaskmoney.ui.dispatch.state import AppState, ConfirmAction, SavedFilter, SettingsSection, Tab


def settings_state(section, **kwargs):
    return AppState(active_tab=Tab.SETTINGS, settings_active=True, settings_section=section, **kwargs)


class TestArm:
    """Test arming and expiry."""

    def test_arm_schedules_expiry(self, keys):
        state, effect = confirm.arm(AppState(), ConfirmAction.CLEAR_DB, "database", keys, clock=lambda: 100.0)

        assert state.confirm.token == 1
        assert state.confirm.deadline == 102.0
        assert state.status == "Press c again to clear all data"
        assert effect == Schedule(2.0, ConfirmExpired(1))

    def test_delete_prompt_names_target(self, keys):
        state, _ = confirm.arm(AppState(), ConfirmAction.DELETE_TAG, "travel", keys)
        assert state.status == "Press del again to delete tag 'travel'"

    def test_expiry_disarms(self, keys):
        state, _ = confirm.arm(AppState(), ConfirmAction.CLEAR_DB, "database", keys)
        state = confirm.handle_expired(state, ConfirmExpired(1))
        assert state.confirm is None
        assert state.status == ""

    def test_stale_expiry_ignored(self, keys):
        """A timer from an earlier arming does not cancel a newer one."""
        state, _ = confirm.arm(AppState(), ConfirmAction.CLEAR_DB, "database", keys)
        state = confirm.disarm(state)
        state, _ = confirm.arm(state, ConfirmAction.CLEAR_DB, "database", keys)

        assert state.confirm.token == 2
        assert confirm.handle_expired(state, ConfirmExpired(1)) is state


class TestHandleKey:
    """Test the second key press."""

    def test_idle_returns_none(self, keys, domain):
        assert confirm.handle_key(AppState(), "c", keys, domain) is None

    def test_other_key_cancels(self, keys, domain):
        state, _ = confirm.arm(AppState(), ConfirmAction.CLEAR_DB, "database", keys)
        state, effect = confirm.handle_key(state, "x", keys, domain)

        assert state.confirm is None
        assert state.status == "Cancelled."
        assert effect is None
        assert domain.calls == []

    def test_same_key_runs_clear_db(self, keys, domain):
        state, _ = confirm.arm(AppState(), ConfirmAction.CLEAR_DB, "database", keys)
        state, effect = confirm.handle_key(state, "c", keys, domain)

        assert state.confirm is None
        assert isinstance(effect, Task)
        assert effect.execute().value == "Database cleared."
        assert domain.calls == [("clear_database",)]

    def test_delete_category(self, keys, domain):
        state = settings_state(SettingsSection.CATEGORIES, categories=("Food", "Rent"), settings_cursor=1)
        state, _ = confirm.arm(state, ConfirmAction.DELETE_CATEGORY, "Rent", keys)
        state, effect = confirm.handle_key(state, "del", keys, domain)

        assert state.categories == ("Food",)
        assert state.settings_cursor == 0
        effect.execute()
        assert domain.calls == [("delete_entity", "category", "Rent")]

    def test_delete_filter_is_local(self, keys, domain):
        """Filters are removed from state directly and clear the applied filter."""
        filters = (SavedFilter("food", "Food", "cat:food"), SavedFilter("rent", "Rent", "cat:rent"))
        state = settings_state(SettingsSection.FILTERS, saved_filters=filters, applied_filter_id="food")
        state, _ = confirm.arm(state, ConfirmAction.DELETE_FILTER, "food", keys)
        state, effect = confirm.handle_key(state, "del", keys, domain)

        assert effect is None
        assert [f.id for f in state.saved_filters] == ["rent"]
        assert state.applied_filter_id == ""
        assert state.status == "Deleted filter 'food'."

    def test_delete_missing_filter(self, keys, domain):
        state = settings_state(SettingsSection.FILTERS)
        state, _ = confirm.arm(state, ConfirmAction.DELETE_FILTER, "gone", keys)
        state, _ = confirm.handle_key(state, "del", keys, domain)
        assert state.status_error

    def test_confirm_profile(self, keys):
        assert confirm.confirm_profile(AppState()) is None
        state, _ = confirm.arm(AppState(), ConfirmAction.DELETE_RULE, "amazon", keys)
        assert confirm.confirm_profile(replace(state)).noun == "rule"
