import pytest

from terminal_tracker.controller import TrackerController
from terminal_tracker.validator import SnapshotValidator
from terminal_tracker.web import create_app
from tracker_helpers import fixed_clock, make_config


@pytest.fixture
def sample_snapshot():
    return [
        {"date": "2024-01-15", "count": 2, "success": 1, "failure": 1, "successRate": 50},
        {"date": "2024-01-16", "count": 1, "success": 1, "failure": 0, "successRate": 100},
    ]


@pytest.fixture
def validator():
    return SnapshotValidator()


@pytest.fixture
def controller(tmp_path):
    return TrackerController(make_config(str(tmp_path)), time_func=fixed_clock)


@pytest.fixture
def app(controller):
    application = create_app(controller)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()
