# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for login credentials (the ``details`` table)."""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from clubhours.core.logging import get_logger
from clubhours.core.security import hash_password, needs_rehash, verify_password

logger = get_logger(__name__)


@dataclass
class Credential:
    id: int
    email: str
    password_hash: str


class CredentialRepository:
    """One credential row per e-mail; members sharing an e-mail share the password."""

    def __init__(self, engine: Engine):
        self._engine = engine

    def init_schema(self) -> None:
        with self._engine.begin() as conn:
            conn.execute(text("""
                CREATE TABLE IF NOT EXISTS details (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    email TEXT UNIQUE NOT NULL,
                    password TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """))
        logger.info("Credential schema ready")

    # ── Read ───────────────────────────────────────────────────────────

    def get_user_by_email(self, email: str) -> Optional[Credential]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text("SELECT id, email, password FROM details WHERE LOWER(email) = LOWER(:email)"),
                {"email": email.strip()},
            ).fetchone()
        if row is None:
            return None
        return Credential(id=row[0], email=row[1], password_hash=row[2])

    def verify_password(self, email: str, password: str) -> Optional[Credential]:
        """The credential row when ``password`` matches, else None."""
        credential = self.get_user_by_email(email)
        if credential is None:
            return None
        if not verify_password(password, credential.password_hash):
            return None
        if needs_rehash(credential.password_hash):
            self.update_password(credential.id, password)
            logger.info("Upgraded credential %s to bcrypt", credential.id)
        return credential

    def verify_connection(self) -> None:
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    # ── Write ──────────────────────────────────────────────────────────

    def create_user(self, email: str, password: str) -> int:
        with self._engine.begin() as conn:
            result = conn.execute(
                text("INSERT INTO details (email, password) VALUES (:email, :password)"),
                {"email": email.strip().lower(), "password": hash_password(password)},
            )
            user_id = result.lastrowid
        logger.info("Created credential %s", user_id)
        return user_id

    def update_password(self, user_id: int, password: str) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                text("UPDATE details SET password = :password WHERE id = :id"),
                {"password": hash_password(password), "id": user_id},
            )
        logger.info("Updated password for credential %s", user_id)
