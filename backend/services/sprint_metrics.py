"""Sprint metrics calculation.

Reduces the issues of a single sprint to commitment, completion, overspill
and velocity counters, and turns those counters into the KPI cards shown on
the dashboard.
"""

import math
from dataclasses import dataclass
from typing import Optional

DEFAULT_STORY_POINTS_FIELD = "customfield_10016"

DONE_CATEGORY = "done"

EMPTY_DISPLAY = "—"


@dataclass(frozen=True)
class SprintMetrics:
    committed_issues: int = 0
    completed_issues: int = 0
    story_points_committed: float = 0
    story_points_completed: float = 0
    overspill_issues: int = 0
    overspill_story_points: float = 0
    velocity: float = 0

    @property
    def completion_rate(self) -> Optional[float]:
        """Share of committed issues that were completed, None for an empty sprint."""
        if not self.committed_issues:
            return None
        return self.completed_issues / self.committed_issues

    @property
    def points_completion_rate(self) -> Optional[float]:
        """Share of committed story points that were completed, None without points."""
        if not self.story_points_committed:
            return None
        return self.story_points_completed / self.story_points_committed

    def to_dict(self) -> dict:
        return {
            "committedIssues": self.committed_issues,
            "completedIssues": self.completed_issues,
            "storyPointsCommitted": self.story_points_committed,
            "storyPointsCompleted": self.story_points_completed,
            "overspillIssues": self.overspill_issues,
            "overspillStoryPoints": self.overspill_story_points,
            "velocity": self.velocity,
        }


def is_done(issue: dict) -> bool:
    """Check if an issue's status belongs to the Done category."""
    fields = issue.get("fields") or {}
    status = fields.get("status") or {}
    category = status.get("statusCategory") or {}
    return category.get("key") == DONE_CATEGORY


def get_story_points(issue: dict, field_id: str = DEFAULT_STORY_POINTS_FIELD) -> float:
    """Extract story points from an issue, 0 when unset or not a number."""
    fields = issue.get("fields") or {}
    points = fields.get(field_id)
    if points is None or isinstance(points, bool):
        return 0

    try:
        points = float(points)
    except (TypeError, ValueError):
        return 0

    # "NaN" and "inf" parse as floats but are not story points
    if not math.isfinite(points):
        return 0
    return points


def derive_sprint_metrics(issues: list,
                          story_points_field: str = DEFAULT_STORY_POINTS_FIELD) -> SprintMetrics:
    """Calculate sprint metrics from the issues in a sprint.

    Args:
        issues: Raw Jira issue records
        story_points_field: Custom field ID holding story points

    Returns:
        SprintMetrics for the given issues
    """
    committed_issues = 0
    completed_issues = 0
    points_committed = 0
    points_completed = 0

    for issue in issues:
        points = get_story_points(issue, story_points_field)
        committed_issues += 1
        points_committed += points

        if is_done(issue):
            completed_issues += 1
            points_completed += points

    return SprintMetrics(
        committed_issues=committed_issues,
        completed_issues=completed_issues,
        story_points_committed=points_committed,
        story_points_completed=points_completed,
        overspill_issues=committed_issues - completed_issues,
        overspill_story_points=points_committed - points_completed,
        velocity=points_completed,
    )


def format_number(value: float) -> str:
    """Render whole numbers without a trailing .0"""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def format_percent(rate: Optional[float]) -> str:
    """Render a 0-1 rate as a whole percentage, rounding half up."""
    if rate is None:
        return EMPTY_DISPLAY
    return f"{math.floor(rate * 100 + 0.5)}%"


def build_kpi_cards(metrics: SprintMetrics) -> list:
    """Build the KPI cards for the sprint metrics view.

    Each card has a title, a display value, a subtitle and a trend
    (``up``, ``down`` or ``neutral``).
    """
    committed = metrics.committed_issues
    completed = metrics.completed_issues

    return [
        {
            "title": "Issues Committed",
            "value": format_number(committed),
            "subtitle": f"{completed} completed",
            "trend": "neutral",
        },
        {
            "title": "Story Points Velocity",
            "value": format_number(metrics.velocity),
            "subtitle": f"{format_number(metrics.story_points_committed)} committed",
            "trend": "up",
        },
        {
            "title": "Completion Rate",
            "value": format_percent(metrics.completion_rate),
            "subtitle": f"{completed}/{committed} issues",
            "trend": "up" if completed == committed else "neutral",
        },
        {
            "title": "Overspill Issues",
            "value": format_number(metrics.overspill_issues),
            "subtitle": "Perfect sprint!" if metrics.overspill_issues == 0 else "Issues not completed",
            "trend": "up" if metrics.overspill_issues == 0 else "down",
        },
        {
            "title": "Overspill Story Points",
            "value": format_number(metrics.overspill_story_points),
            "subtitle": ("All points delivered!" if metrics.overspill_story_points == 0
                         else "Points not delivered"),
            "trend": "up" if metrics.overspill_story_points == 0 else "down",
        },
        {
            "title": "Sprint Health Score",
            "value": format_percent(metrics.points_completion_rate),
            "subtitle": "Story points completion rate",
            "trend": ("up" if metrics.story_points_completed == metrics.story_points_committed
                      else "neutral"),
        },
    ]
