"""Board and sprint API endpoints."""

from flask import Blueprint, jsonify

from app import get_jira_client

bp = Blueprint("boards", __name__, url_prefix="/api/boards")


def _respond(data, notifications):
    """Build the JSON response, 502 if the Jira client reported a failure."""
    if not notifications:
        return jsonify({"data": data})

    return jsonify({
        "data": data,
        "error": notifications[0].description,
        "notifications": [n.to_dict() for n in notifications]
    }), 502


@bp.route("", methods=["GET"])
def list_boards():
    """List all boards accessible to the connected user."""
    notifications = []
    boards = get_jira_client(notify=notifications.append).list_boards()
    return _respond([board.to_dict() for board in boards], notifications)


@bp.route("/sprints", methods=["GET"])
def get_default_board_sprints():
    """Get sprints for the default board.

    Uses the configured default board, or the first board Jira returns.
    """
    notifications = []
    sprints = get_jira_client(notify=notifications.append).list_sprints()
    return _respond([sprint.to_dict() for sprint in sprints], notifications)


@bp.route("/<int:board_id>/sprints", methods=["GET"])
def get_sprints(board_id):
    """Get sprints for a board, in the order Jira returns them."""
    notifications = []
    sprints = get_jira_client(notify=notifications.append).list_sprints(board_id)
    return _respond([sprint.to_dict() for sprint in sprints], notifications)
