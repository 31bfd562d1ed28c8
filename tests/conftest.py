"""
Test fixtures and configuration for pytest
"""

import logging
from unittest.mock import MagicMock

import pytest
from flask import Flask

ACCESS_TOKEN = "B42nHP04s06ov18Dv8X7VI4nVUs6w04X"


class StubSession:
    """In-memory ``SessionSource`` that counts reads."""

    def __init__(self, data=None, session_id="X"):
        self.data = dict(data or {})
        self.session_id = session_id
        self.reads = 0

    def put(self, key, value):
        self.data[key] = value

    def all(self):
        self.reads += 1
        return dict(self.data)

    def get_id(self):
        return self.session_id


# ── SDK isolation ────────────────────────────────────────────────
# pyrollbar keeps global settings and sends over the network.  Every test
# gets a fresh mock in its place.


@pytest.fixture(autouse=True)
def rollbar_sdk(monkeypatch):
    """Replace the ``rollbar`` module used by the reporting client."""
    sdk = MagicMock(name="rollbar")
    sdk._initialized = False
    sdk.SETTINGS = {}

    def init(access_token, **kw):
        sdk.SETTINGS = {**sdk.SETTINGS, **kw, "access_token": access_token}
        sdk._initialized = True

    sdk.init.side_effect = init
    sdk.lib.dict_merge.side_effect = lambda a, b: {**a, **b}
    monkeypatch.setattr("flask_rollbar.client.rollbar", sdk)
    return sdk


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("ROLLBAR_TOKEN", "ROLLBAR_ENV", "ROLLBAR_LEVEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def access_token(monkeypatch):
    monkeypatch.setenv("ROLLBAR_TOKEN", ACCESS_TOKEN)
    return ACCESS_TOKEN


@pytest.fixture
def session():
    return StubSession()


@pytest.fixture
def app(access_token):
    """A bare Flask app with the token in the environment."""
    app = Flask(__name__)
    app.secret_key = "test-secret"
    app.config["LOGGING"] = {"channels": {"rollbar": {}}}
    yield app
    # app.logger is shared between tests; undo what registration changed
    state = app.extensions.get("rollbar")
    if state is not None:
        app.logger.removeHandler(state.channel)
        state.remove_level_filters()
    app.logger.setLevel(logging.NOTSET)


@pytest.fixture
def rollbar_app(app, session):
    """An app with the extension registered over ``session``."""
    from flask_rollbar import Rollbar

    Rollbar(app, session=session)
    return app
