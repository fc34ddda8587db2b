"""Shared fixtures for Sprint Dashboard tests."""

import pytest
import requests
from unittest.mock import Mock, patch

from services.credential_store import CredentialStore, Credentials
from services.session import JiraSession


def _mock_response(payload, status_code=200):
    response = Mock(status_code=status_code)
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} Client Error"
        )
    return response


@pytest.fixture
def mock_jira_credentials():
    """Mock Jira credentials for testing."""
    return {
        "domain": "test.atlassian.net",
        "email": "test@example.com",
        "token": "test-token-123"
    }


@pytest.fixture
def credentials(mock_jira_credentials):
    return Credentials(**mock_jira_credentials)


@pytest.fixture
def credentials_file(tmp_path):
    return str(tmp_path / "config" / "credentials.json")


@pytest.fixture
def store(credentials_file):
    return CredentialStore(credentials_file)


@pytest.fixture
def connected_session(store, credentials):
    """Session with credentials already stored."""
    store.save(credentials)
    return JiraSession.load(store)


@pytest.fixture
def disconnected_session(store):
    return JiraSession.load(store)


@pytest.fixture
def jira_api():
    """Patch requests.get with canned Jira Agile API responses.

    Register responses on ``jira_api.routes`` keyed by endpoint path
    (e.g. "/board"). A value may be a JSON payload, a (payload, status)
    tuple, or an exception to raise. Unregistered endpoints return 404.
    """
    routes = {}

    def fake_get(url, **kwargs):
        endpoint = url.split("/rest/agile/1.0", 1)[1]
        route = routes.get(endpoint, ({"errorMessages": ["Not found"]}, 404))

        if isinstance(route, Exception):
            raise route
        if isinstance(route, tuple):
            return _mock_response(*route)
        return _mock_response(route)

    with patch("services.jira_client.requests.get", side_effect=fake_get) as mock_get:
        mock_get.routes = routes
        yield mock_get


@pytest.fixture
def sample_boards_response():
    """Sample response for the board list endpoint."""
    return {
        "maxResults": 50,
        "startAt": 0,
        "isLast": True,
        "values": [
            {"id": 7, "name": "Team Alpha board", "type": "scrum"},
            {"id": 9, "name": "Team Beta board", "type": "kanban"}
        ]
    }


@pytest.fixture
def sample_sprints_response():
    """Sample response for a board's sprint list."""
    return {
        "maxResults": 50,
        "startAt": 0,
        "isLast": True,
        "values": [
            {
                "id": 100,
                "name": "Sprint 1",
                "state": "CLOSED",
                "startDate": "2024-01-01T00:00:00.000Z",
                "endDate": "2024-01-14T00:00:00.000Z"
            },
            {
                "id": 101,
                "name": "Sprint 2",
                "state": "active",
                "startDate": "2024-01-15T00:00:00.000Z",
                "endDate": "2024-01-28T00:00:00.000Z"
            },
            {
                "id": 102,
                "name": "Sprint 3",
                "state": "future"
            }
        ]
    }


@pytest.fixture
def sample_sprint():
    """Sample response for a single sprint."""
    return {
        "id": 101,
        "name": "Sprint 2",
        "state": "active",
        "startDate": "2024-01-15T00:00:00.000Z",
        "endDate": "2024-01-28T00:00:00.000Z",
        "goal": "Complete feature X"
    }


def _issue(key, category, points=None):
    fields = {
        "summary": f"Issue {key}",
        "status": {
            "name": "Done" if category == "done" else "In Progress",
            "statusCategory": {"key": category}
        }
    }
    if points is not None:
        fields["customfield_10016"] = points
    return {"key": key, "fields": fields}


@pytest.fixture
def sample_issue_done():
    return _issue("PROJ-1", "done", 5)


@pytest.fixture
def sample_issue_in_progress():
    return _issue("PROJ-3", "indeterminate", 2)


@pytest.fixture
def sample_issue_no_points():
    return _issue("PROJ-4", "done")


@pytest.fixture
def sample_sprint_issues():
    """Two done issues (5 and 3 points) and one in progress (2 points)."""
    return [
        _issue("PROJ-1", "done", 5),
        _issue("PROJ-2", "done", 3),
        _issue("PROJ-3", "indeterminate", 2)
    ]


@pytest.fixture
def app(credentials_file):
    """Create Flask test app without a stored connection."""
    from app import create_app
    app = create_app({
        "TESTING": True,
        "CREDENTIALS_FILE": credentials_file
    })
    return app


@pytest.fixture
def connected_app(store, credentials, credentials_file):
    """Create Flask test app with stored credentials."""
    store.save(credentials)

    from app import create_app
    app = create_app({
        "TESTING": True,
        "CREDENTIALS_FILE": credentials_file
    })
    return app


@pytest.fixture
def client(app):
    """Create Flask test client."""
    return app.test_client()


@pytest.fixture
def connected_client(connected_app):
    """Create Flask test client for a connected app."""
    return connected_app.test_client()
