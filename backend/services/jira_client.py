"""Jira Agile REST API client for the sprint dashboard."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from services.session import JiraSession
from services.sprint_metrics import (
    DEFAULT_STORY_POINTS_FIELD,
    SprintMetrics,
    derive_sprint_metrics,
)

logger = logging.getLogger(__name__)

AGILE_API_PREFIX = "/rest/agile/1.0"

SPRINTS_ERROR = "Failed to fetch sprints from Jira"
SPRINT_DATA_ERROR = "Failed to fetch sprint data from Jira"
BOARDS_ERROR = "Failed to fetch boards from Jira"

SPRINT_STATE_LABELS = {
    "active": "Active",
    "closed": "Completed",
    "future": "Future",
}


class JiraApiError(Exception):
    """Raised when a Jira request fails or returns an unusable response."""


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    variant: str = "default"

    def to_dict(self) -> dict:
        return {"title": self.title, "description": self.description, "variant": self.variant}


@dataclass(frozen=True)
class Board:
    id: int
    name: str
    type: Optional[str] = None

    @classmethod
    def from_api(cls, board: dict) -> "Board":
        return cls(id=board["id"], name=board["name"], type=board.get("type"))

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "type": self.type}


@dataclass(frozen=True)
class Sprint:
    id: int
    name: str
    state: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    @classmethod
    def from_api(cls, sprint: dict) -> "Sprint":
        return cls(
            id=sprint["id"],
            name=sprint["name"],
            state=sprint["state"].lower(),
            start_date=sprint.get("startDate"),
            end_date=sprint.get("endDate"),
        )

    @property
    def state_label(self) -> str:
        return SPRINT_STATE_LABELS.get(self.state, "Unknown")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "state": self.state,
            "stateLabel": self.state_label,
            "startDate": self.start_date,
            "endDate": self.end_date,
        }


@dataclass(frozen=True)
class SprintReport:
    sprint: Sprint
    metrics: SprintMetrics

    def to_dict(self) -> dict:
        return {"sprint": self.sprint.to_dict(), "metrics": self.metrics.to_dict()}


class JiraClient:
    """Fetches boards, sprints and sprint issues for the connected session.

    Public methods never raise on Jira failures: they report the failure
    through ``notify`` and return an empty result instead.
    """

    def __init__(self, session: JiraSession,
                 notify: Optional[Callable[[Notification], None]] = None,
                 story_points_field: str = DEFAULT_STORY_POINTS_FIELD,
                 default_board_id: Optional[int] = None,
                 timeout: Optional[float] = None):
        self.session = session
        self.notify = notify
        self.story_points_field = story_points_field
        self.default_board_id = default_board_id
        self.timeout = timeout

    def _report_error(self, message: str):
        if self.notify is not None:
            self.notify(Notification(title="Error", description=message, variant="destructive"))

    def _request(self, endpoint: str):
        """Make authenticated request to the Jira Agile API."""
        credentials = self.session.credentials
        if credentials is None or not credentials.is_complete():
            raise JiraApiError("Not connected to Jira")

        url = f"https://{credentials.domain}{AGILE_API_PREFIX}{endpoint}"
        try:
            response = requests.get(
                url,
                auth=credentials.auth,
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            raise JiraApiError(f"Jira API error on {endpoint}: {e}") from e
        except ValueError as e:
            raise JiraApiError(f"Invalid JSON from Jira on {endpoint}: {e}") from e

    def _first_board_id(self) -> Optional[int]:
        boards = self._request("/board").get("values") or []
        if not boards:
            return None
        return boards[0]["id"]

    def _fetch_sprint(self, sprint_id: int) -> Sprint:
        return Sprint.from_api(self._request(f"/sprint/{sprint_id}"))

    def _fetch_sprint_issues(self, sprint_id: int) -> list:
        return self._request(f"/sprint/{sprint_id}/issue").get("issues") or []

    def list_boards(self) -> list:
        """List the boards visible to the connected user."""
        if not self.session.is_connected:
            return []

        try:
            boards = self._request("/board").get("values") or []
            return [Board.from_api(board) for board in boards]
        except (JiraApiError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Listing boards failed: {e}")
            self._report_error(BOARDS_ERROR)
            return []

    def list_sprints(self, board_id: Optional[int] = None) -> list:
        """List the sprints of a board.

        Args:
            board_id: Jira board ID. Defaults to the configured board, or the
                first board returned by Jira when none is configured.

        Returns:
            List of Sprint in the order Jira returns them; empty when not
            connected or when any request fails.
        """
        if not self.session.is_connected:
            return []

        if board_id is None:
            board_id = self.default_board_id

        try:
            if board_id is None:
                board_id = self._first_board_id()
                if board_id is None:
                    logger.info("No boards available, nothing to list sprints for")
                    return []

            sprints = self._request(f"/board/{board_id}/sprint").get("values") or []
            result = [Sprint.from_api(sprint) for sprint in sprints]
        except (JiraApiError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Listing sprints for board {board_id} failed: {e}")
            self._report_error(SPRINTS_ERROR)
            return []

        logger.info(f"Fetched {len(result)} sprints for board {board_id}")
        return result

    def get_sprint(self, sprint_id: int) -> Optional[Sprint]:
        """Get a single sprint's details."""
        if not self.session.is_connected:
            return None

        try:
            return self._fetch_sprint(sprint_id)
        except (JiraApiError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Fetching sprint {sprint_id} failed: {e}")
            self._report_error(SPRINT_DATA_ERROR)
            return None

    def get_sprint_report(self, sprint_id: int) -> Optional[SprintReport]:
        """Fetch a sprint and its issues and derive the sprint metrics."""
        if not self.session.is_connected:
            return None

        try:
            sprint = self._fetch_sprint(sprint_id)
            issues = self._fetch_sprint_issues(sprint_id)
            metrics = derive_sprint_metrics(issues, self.story_points_field)
        except (JiraApiError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Fetching sprint data for sprint {sprint_id} failed: {e}")
            self._report_error(SPRINT_DATA_ERROR)
            return None

        logger.info(f"Derived metrics for sprint {sprint_id} from {len(issues)} issues")
        return SprintReport(sprint=sprint, metrics=metrics)

    def get_sprint_metrics(self, sprint_id: int) -> Optional[SprintMetrics]:
        report = self.get_sprint_report(sprint_id)
        return report.metrics if report else None
