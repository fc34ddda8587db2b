"""Jira connection API endpoints.

Credentials are kept in a local JSON file so the connection survives
restarts. This is intended for local use only - not for hosted deployments.
"""

from flask import Blueprint, request, jsonify

from app import get_jira_client, get_session
from services.credential_store import Credentials
from services.jira_client import Notification

bp = Blueprint("connection", __name__, url_prefix="/api/connection")


def _connection_info(session):
    credentials = session.credentials
    return {
        "connected": session.is_connected,
        "domain": credentials.domain if credentials else None,
        "email": credentials.email if credentials else None,
    }


@bp.route("", methods=["GET"])
def get_connection():
    """Get the current connection state.

    The API token is never returned.
    """
    return jsonify({"data": _connection_info(get_session())})


@bp.route("", methods=["POST"])
def connect():
    """Connect to Jira and fetch the sprint list.

    Expects JSON body with:
        - domain: Jira site hostname (e.g. yourcompany.atlassian.net)
        - email: User's Jira email
        - token: Jira API token
    """
    data = request.get_json(silent=True)

    if not data:
        return jsonify({"error": "Missing request body"}), 400

    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    domain = data.get("domain", "")
    email = data.get("email", "")
    token = data.get("token") or data.get("apiToken") or ""

    if not all(isinstance(value, str) for value in (domain, email, token)):
        return jsonify({"error": "Fields domain, email and token must be strings"}), 400

    credentials = Credentials(domain=domain, email=email, token=token)

    if not credentials.is_complete():
        return jsonify({"error": "Missing required fields: domain, email, token"}), 400

    session = get_session()
    session.connect(credentials)

    notifications = [Notification(title="Connected", description="Successfully connected to Jira")]
    sprints = get_jira_client(notify=notifications.append).list_sprints()

    info = _connection_info(session)
    info["sprints"] = [sprint.to_dict() for sprint in sprints]

    return jsonify({
        "data": info,
        "notifications": [n.to_dict() for n in notifications]
    })


@bp.route("", methods=["DELETE"])
def disconnect():
    """Forget the stored credentials."""
    session = get_session()
    session.disconnect()

    return jsonify({"data": _connection_info(session)})
