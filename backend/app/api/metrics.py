"""Sprint metrics API endpoints."""

from flask import Blueprint, jsonify

from app import get_jira_client
from services.sprint_metrics import build_kpi_cards

bp = Blueprint("metrics", __name__, url_prefix="/api/metrics")


@bp.route("/sprints/<int:sprint_id>", methods=["GET"])
def get_sprint_metrics(sprint_id):
    """Get metrics for a single sprint.

    Returns:
        - Sprint details
        - Committed/completed issues and story points, overspill, velocity
        - KPI cards ready for display
    """
    notifications = []
    report = get_jira_client(notify=notifications.append).get_sprint_report(sprint_id)

    if notifications:
        return jsonify({
            "data": None,
            "error": notifications[0].description,
            "notifications": [n.to_dict() for n in notifications]
        }), 502

    if report is None:
        return jsonify({"data": None})

    data = report.to_dict()
    data["cards"] = build_kpi_cards(report.metrics)
    return jsonify({"data": data})
