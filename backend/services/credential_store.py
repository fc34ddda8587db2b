"""Local Jira credentials storage.

Stores the connection in a local JSON file so it survives restarts.
This is intended for local use only - tokens are stored unencrypted.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

STORAGE_KEY = "jiraConfig"


def _normalize_domain(domain) -> str:
    """Reduce a pasted Jira URL to its hostname."""
    if not isinstance(domain, str):
        return ""

    domain = domain.strip()
    for prefix in ("https://", "http://"):
        if domain[:len(prefix)].lower() == prefix:
            domain = domain[len(prefix):]
    return domain.rstrip("/")


def _string_field(data: dict, *keys) -> str:
    """First non-empty string among keys, else empty string."""
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


@dataclass(frozen=True)
class Credentials:
    """Jira Cloud connection details."""

    domain: str
    email: str
    token: str = field(repr=False)

    def __post_init__(self):
        object.__setattr__(self, "domain", _normalize_domain(self.domain))

    def is_complete(self) -> bool:
        return all([self.domain, self.email, self.token])

    @property
    def auth(self) -> tuple:
        return self.email, self.token

    @classmethod
    def from_dict(cls, data: dict) -> "Credentials":
        return cls(
            domain=_string_field(data, "domain"),
            email=_string_field(data, "email"),
            token=_string_field(data, "apiToken", "token"),
        )

    def to_dict(self) -> dict:
        return {"domain": self.domain, "email": self.email, "apiToken": self.token}


class CredentialStore:
    """Persist a single credential record under a fixed key."""

    def __init__(self, path: str, key: str = STORAGE_KEY):
        self.path = path
        self.key = key

    def _ensure_dir(self):
        config_dir = os.path.dirname(self.path)
        if config_dir and not os.path.exists(config_dir):
            os.makedirs(config_dir)

    def _read(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (ValueError, OSError) as e:
            logger.warning(f"Ignoring unreadable credentials file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict):
        self._ensure_dir()
        with open(self.path, "w") as f:
            json.dump(data, f, indent=2)

    def load(self) -> Optional[Credentials]:
        """Return the stored credentials, or None if nothing usable is stored."""
        stored = self._read().get(self.key)
        if not isinstance(stored, dict):
            return None

        credentials = Credentials.from_dict(stored)
        if not credentials.is_complete():
            return None
        return credentials

    def save(self, credentials: Credentials):
        """Store credentials, keeping any other keys in the file."""
        data = self._read()
        data[self.key] = credentials.to_dict()
        self._write(data)

    def clear(self):
        """Remove the stored credentials."""
        data = self._read()
        data.pop(self.key, None)

        if data:
            self._write(data)
        elif os.path.exists(self.path):
            os.remove(self.path)
