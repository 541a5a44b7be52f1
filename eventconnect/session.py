"""Session context and its persisted record."""

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from eventconnect.errors import AuthError
from eventconnect.models.config import EventConnectConfig
from eventconnect.models.wire import ensure_mapping

logger = structlog.get_logger(__name__)


class SessionContext(BaseModel):
    """Authenticated user and bearer token, handed to components that call protected endpoints."""

    token: str
    token_type: str = "Bearer"
    user_id: Optional[int] = None
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    role: Optional[str] = None

    @classmethod
    def from_login_response(cls, data: Any) -> "SessionContext":
        """Build a session from the ``/auth/login`` response body."""
        data = ensure_mapping(data, "login response")
        if not data.get("token"):
            raise AuthError("Login response does not carry a token")
        return cls(
            token=data["token"],
            token_type=data.get("type") or "Bearer",
            user_id=data.get("id"),
            email=data.get("email") or "",
            first_name=data.get("prenom") or "",
            last_name=data.get("nom") or "",
            role=data.get("role"),
        )

    def require_token(self) -> str:
        if not self.token:
            raise AuthError("No bearer token in session")
        return self.token


class SessionStore:
    """Single session record kept under a well-known key in a small SQLite file."""

    def __init__(self, config: EventConnectConfig):
        self.db_path = config.session_path
        self.key = config.session_key
        self.logger = logger.bind(component="session_store", key=self.key)

        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS client_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
            """)
            conn.commit()

    def load(self) -> Optional[SessionContext]:
        """Stored session, or None when absent or unreadable."""
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT value FROM client_state WHERE key = ?",
                (self.key,)
            ).fetchone()

        if row is None:
            return None

        try:
            return SessionContext.model_validate(json.loads(row[0]))
        except (ValueError, PydanticValidationError) as e:
            self.logger.error("Stored session is unreadable, ignoring it", error=str(e))
            return None

    def save(self, session: SessionContext) -> None:
        """Persist the session (login)."""
        now = datetime.now(timezone.utc)
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO client_state (key, value, updated_at) VALUES (?, ?, ?)",
                (self.key, session.model_dump_json(), now.isoformat())
            )
            conn.commit()
        self.logger.info("Session stored", email=session.email)

    def clear(self) -> None:
        """Drop the session (logout)."""
        with sqlite3.connect(self.db_path) as conn:
            deleted = conn.execute(
                "DELETE FROM client_state WHERE key = ?",
                (self.key,)
            ).rowcount
            conn.commit()
        if deleted:
            self.logger.info("Session cleared")
