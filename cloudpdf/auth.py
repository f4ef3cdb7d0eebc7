"""Password sign-in and session tokens for user-scoped operations."""

import logging
import secrets
import threading
import uuid
from dataclasses import dataclass
from typing import Dict, Tuple

from passlib.context import CryptContext

from .errors import AuthenticationError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@dataclass(frozen=True)
class Session:
    """Authenticated user, passed explicitly to every user-scoped operation."""
    user_id: str
    email: str


@dataclass(frozen=True)
class _Account:
    user_id: str
    email: str
    password_hash: str


class InMemoryIdentityProvider:
    """Email/password identity provider issuing opaque bearer tokens."""

    def __init__(self):
        self._accounts: Dict[str, _Account] = {}
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def add_user(self, email: str, password: str) -> Session:
        email = email.strip().lower()
        if not email or not password:
            raise ValueError("Email and password are required")
        account = _Account(
            user_id=uuid.uuid4().hex,
            email=email,
            password_hash=pwd_context.hash(password),
        )
        with self._lock:
            if email in self._accounts:
                raise ValueError(f"User '{email}' already exists")
            self._accounts[email] = account
        return Session(user_id=account.user_id, email=account.email)

    def sign_in(self, email: str, password: str) -> Tuple[str, Session]:
        with self._lock:
            account = self._accounts.get(email.strip().lower())
        if account is None or not pwd_context.verify(password, account.password_hash):
            logger.warning(f"Failed sign-in attempt for {email}")
            raise AuthenticationError("Invalid email or password")

        token = secrets.token_urlsafe(32)
        session = Session(user_id=account.user_id, email=account.email)
        with self._lock:
            self._sessions[token] = session
        logger.info(f"User {account.user_id} signed in")
        return token, session

    def resolve(self, token: str) -> Session:
        with self._lock:
            session = self._sessions.get(token)
        if session is None:
            raise AuthenticationError("Invalid or expired session token")
        return session

    def sign_out(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)
