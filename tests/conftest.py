"""Shared pytest fixtures for jaskmoney tests."""

from typing import List, Tuple

import pytest

from jaskmoney.ui.dispatch.dispatcher import Dispatcher
from jaskmoney.ui.dispatch.effects import Effect, LoggingDomain
from jaskmoney.ui.dispatch.state import AppState
from jaskmoney.ui.keybindings import KeyRegistry, build_default_registry


@pytest.fixture
def keys() -> KeyRegistry:
    """A fresh registry holding the default bindings."""
    return build_default_registry()


@pytest.fixture
def domain() -> LoggingDomain:
    return LoggingDomain()


@pytest.fixture
def dispatcher(keys, domain) -> Dispatcher:
    return Dispatcher(keys, domain=domain)


@pytest.fixture
def press(dispatcher):
    """Feed keys through the dispatcher, collecting every effect."""

    def _press(state: AppState, *key_names: str) -> Tuple[AppState, List[Effect]]:
        effects: List[Effect] = []
        for key in key_names:
            result = dispatcher.handle_key(state, key)
            state = result.state
            effects.extend(result.effects)
        return state, effects

    return _press


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    """Point the keybindings file at a temporary directory."""
    path = tmp_path / "keybindings.yaml"
    monkeypatch.setattr("jaskmoney.ui.keybindings.config.DEFAULT_CONFIG_PATH", path)
    return path
