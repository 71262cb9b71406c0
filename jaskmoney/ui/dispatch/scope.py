"""Scope resolution for the active tab when no overlay owns the keyboard."""

from jaskmoney.ui.keybindings.context import Scope

from .confirm import confirm_profile
from .state import AppState, ManagerMode, SettingsEditMode, SettingsSection, Tab

_SECTION_SCOPES = {
    SettingsSection.CATEGORIES: Scope.SETTINGS_ACTIVE_CATEGORIES,
    SettingsSection.TAGS: Scope.SETTINGS_ACTIVE_TAGS,
    SettingsSection.RULES: Scope.SETTINGS_ACTIVE_RULES,
    SettingsSection.FILTERS: Scope.SETTINGS_ACTIVE_FILTERS,
    SettingsSection.CHART: Scope.SETTINGS_ACTIVE_CHART,
    SettingsSection.DB_IMPORT: Scope.SETTINGS_ACTIVE_DB_IMPORT,
    SettingsSection.IMPORT_HISTORY: Scope.SETTINGS_ACTIVE_IMPORT_HISTORY,
}


def settings_active_scope(section: SettingsSection) -> Scope:
    return _SECTION_SCOPES[section]


def settings_tab_scope(state: AppState) -> Scope:
    # Overlays normally win before we get here
    if state.rule_editor is not None:
        return Scope.RULE_EDITOR
    if state.dry_run_open:
        return Scope.DRY_RUN_MODAL
    if state.settings_edit_mode in (SettingsEditMode.ADD_CATEGORY, SettingsEditMode.EDIT_CATEGORY):
        return Scope.SETTINGS_MODE_CAT
    if state.settings_edit_mode in (SettingsEditMode.ADD_TAG, SettingsEditMode.EDIT_TAG):
        return Scope.SETTINGS_MODE_TAG
    profile = confirm_profile(state)
    if profile is not None:
        return profile.scope
    if state.settings_active:
        return settings_active_scope(state.settings_section)
    return Scope.SETTINGS_NAV


def tab_scope(state: AppState) -> Scope:
    """Keybinding scope of the active tab's current sub-state."""
    if state.active_tab is Tab.DASHBOARD:
        if state.dash_custom_input is not None:
            return Scope.DASHBOARD_CUSTOM_INPUT
        if state.dash_timeframe_focus:
            return Scope.DASHBOARD_TIMEFRAME
        if state.dash_focused_section >= 0:
            return Scope.DASHBOARD_FOCUSED
        return Scope.DASHBOARD
    if state.active_tab is Tab.MANAGER:
        if state.manager_mode is ManagerMode.ACCOUNTS:
            return Scope.MANAGER
        return Scope.TRANSACTIONS
    if state.active_tab is Tab.BUDGET:
        return Scope.BUDGET
    return settings_tab_scope(state)
