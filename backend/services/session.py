"""Jira connection session."""

import logging
from typing import Optional

from services.credential_store import CredentialStore, Credentials

logger = logging.getLogger(__name__)


class JiraSession:
    """Holds the active Jira credentials and keeps them in sync with the store.

    Use ``JiraSession.load(store)`` to restore a previous connection and
    ``disconnect()`` to tear it down.
    """

    def __init__(self, store: CredentialStore, credentials: Optional[Credentials] = None):
        self.store = store
        self._credentials = credentials

    @classmethod
    def load(cls, store: CredentialStore) -> "JiraSession":
        return cls(store, store.load())

    @property
    def credentials(self) -> Optional[Credentials]:
        return self._credentials

    @property
    def is_connected(self) -> bool:
        return self._credentials is not None and self._credentials.is_complete()

    def connect(self, credentials: Credentials):
        if not credentials.is_complete():
            raise ValueError("domain, email and token are all required")

        self.store.save(credentials)
        self._credentials = credentials
        logger.info(f"Connected to Jira at {credentials.domain} as {credentials.email}")

    def disconnect(self):
        self.store.clear()
        self._credentials = None
        logger.info("Disconnected from Jira")
