"""Flask application factory."""

import json
import os
from flask import Flask, current_app
from flask_cors import CORS

from services.credential_store import CredentialStore
from services.jira_client import JiraClient
from services.session import JiraSession
from services.sprint_metrics import DEFAULT_STORY_POINTS_FIELD

CONFIG_DIR = os.path.join(os.path.dirname(__file__), "..", "config")

# dashboard-config.json key -> app.config key
DASHBOARD_CONFIG_KEYS = {
    "storyPointsField": "STORY_POINTS_FIELD",
    "defaultBoardId": "DEFAULT_BOARD_ID",
    "requestTimeout": "JIRA_REQUEST_TIMEOUT",
    "corsOrigins": "CORS_ORIGINS",
}


def load_dashboard_config(app):
    """Load optional dashboard settings from config file."""
    config_path = os.path.join(CONFIG_DIR, "dashboard-config.json")

    if not os.path.exists(config_path):
        app.logger.info("No dashboard-config.json found, using defaults")
        return

    try:
        with open(config_path, "r") as f:
            config = json.load(f)
    except (ValueError, OSError) as e:
        app.logger.warning(f"Failed to load dashboard config: {e}")
        return

    for json_key, config_key in DASHBOARD_CONFIG_KEYS.items():
        if json_key in config:
            app.config[config_key] = config[json_key]
    app.logger.info(f"Loaded dashboard config from {config_path}")


def get_session() -> JiraSession:
    """Return the Jira session of the running app."""
    return current_app.extensions["jira_session"]


def get_jira_client(notify=None) -> JiraClient:
    """Build a Jira client for the current session and app config."""
    return JiraClient(
        get_session(),
        notify=notify,
        story_points_field=current_app.config["STORY_POINTS_FIELD"],
        default_board_id=current_app.config["DEFAULT_BOARD_ID"],
        timeout=current_app.config["JIRA_REQUEST_TIMEOUT"],
    )


def create_app(test_config=None):
    """Create and configure the Flask application."""
    app = Flask(__name__)

    app.config.from_mapping(
        CREDENTIALS_FILE=os.environ.get(
            "SPRINT_DASHBOARD_CREDENTIALS_FILE",
            os.path.join(CONFIG_DIR, "credentials.json")
        ),
        STORY_POINTS_FIELD=DEFAULT_STORY_POINTS_FIELD,
        DEFAULT_BOARD_ID=None,
        JIRA_REQUEST_TIMEOUT=None,
        CORS_ORIGINS=["http://localhost:5173", "http://127.0.0.1:5173"],
    )

    if test_config is None:
        load_dashboard_config(app)
    else:
        app.config.update(test_config)

    # Enable CORS for frontend
    CORS(app, resources={
        r"/api/*": {
            "origins": app.config["CORS_ORIGINS"],
            "methods": ["GET", "POST", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type"]
        }
    })

    # Restore a previous connection, if any
    store = CredentialStore(app.config["CREDENTIALS_FILE"])
    app.extensions["jira_session"] = JiraSession.load(store)

    # Register blueprints
    from app.api import boards, connection, metrics
    app.register_blueprint(connection.bp)
    app.register_blueprint(boards.bp)
    app.register_blueprint(metrics.bp)

    # Health check endpoint
    @app.route("/health")
    def health():
        return {"status": "ok"}

    return app
