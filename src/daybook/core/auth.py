"""Email and password sessions.

Signing in checks the credentials with the backend and issues a signed JWT
that is kept in the state directory. Data operations require a session
whose token still verifies and has not expired.
"""

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

from jose import ExpiredSignatureError, JWTError, jwt  # type: ignore[import-untyped]

from daybook.core.backend import Backend
from daybook.core.errors import AuthenticationError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def create_access_token(
    data: dict[str, Any], secret_key: str, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a signed JWT.

    Args:
        data: Claims to encode in the token
        secret_key: Secret key for signing
        expires_delta: Lifetime of the token. Defaults to 24 hours

    Returns:
        Encoded JWT token string
    """
    now = datetime.now(timezone.utc)
    to_encode = data.copy()
    to_encode.update({"exp": now + (expires_delta or timedelta(hours=24)), "iat": now})
    encoded_jwt: str = jwt.encode(to_encode, secret_key, algorithm=ALGORITHM)
    return encoded_jwt


@dataclass
class Session:
    """An authenticated user session.

    Attributes:
        user_id: Backend user id
        email: Email the user signed in with
        token: Signed session token
        secret_key: Key the token is verified against (not persisted)
    """

    user_id: str
    email: str
    token: str
    secret_key: str

    def claims(self) -> dict[str, Any]:
        """Decode and verify the token.

        Raises:
            AuthenticationError: If the token is expired, tampered with, or
                issued for another user
        """
        try:
            payload: dict[str, Any] = jwt.decode(
                self.token, self.secret_key, algorithms=[ALGORITHM]
            )
        except ExpiredSignatureError:
            raise AuthenticationError("Session expired, please log in again")
        except JWTError as e:
            raise AuthenticationError(f"Invalid session: {e}")
        if payload.get("sub") != self.user_id:
            raise AuthenticationError("Invalid session: user mismatch")
        return payload

    def require_valid(self) -> None:
        """Raise AuthenticationError unless the session is valid."""
        self.claims()

    @property
    def is_valid(self) -> bool:
        try:
            self.claims()
        except AuthenticationError:
            return False
        return True

    @property
    def expires_at(self) -> datetime:
        """Expiry time of the token (UTC)."""
        return datetime.fromtimestamp(self.claims()["exp"], tz=timezone.utc)


class SessionManager:
    """Sign users in and out and persist the current session."""

    def __init__(self, state_dir: Path, secret_key: str, expiry_hours: int = 720):
        """Initialize session manager.

        Args:
            state_dir: Directory holding session.json
            secret_key: Key used to sign session tokens
            expiry_hours: Session lifetime
        """
        self.session_file = Path(state_dir) / "session.json"
        self.secret_key = secret_key
        self.expiry_hours = expiry_hours

    def _issue(self, user_id: str, email: str) -> Session:
        token = create_access_token(
            data={"sub": user_id, "email": email},
            secret_key=self.secret_key,
            expires_delta=timedelta(hours=self.expiry_hours),
        )
        session = Session(user_id=user_id, email=email, token=token, secret_key=self.secret_key)
        self._save(session)
        return session

    def _save(self, session: Session) -> None:
        """Write the session file atomically."""
        data = asdict(session)
        del data["secret_key"]
        self.session_file.parent.mkdir(parents=True, exist_ok=True)
        temp_file = self.session_file.with_suffix(".tmp")
        with open(temp_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        temp_file.replace(self.session_file)

    def sign_up(self, backend: Backend, email: str, password: str) -> Session:
        """Create an account and sign in to it."""
        user_id = backend.sign_up(email, password)
        logger.info(f"Signed up {email}")
        return self._issue(user_id, email.strip().lower())

    def sign_in(self, backend: Backend, email: str, password: str) -> Session:
        """Sign in with email and password.

        Raises:
            AuthenticationError: If the backend rejects the credentials
        """
        user_id = backend.authenticate(email, password)
        logger.info(f"Signed in {email}")
        return self._issue(user_id, email.strip().lower())

    def sign_out(self) -> bool:
        """Forget the current session.

        Returns:
            True if a session was removed, False if none existed
        """
        if not self.session_file.exists():
            return False
        self.session_file.unlink()
        logger.info("Signed out")
        return True

    def current(self) -> Session:
        """Load the stored session and verify it.

        Raises:
            AuthenticationError: If nobody is signed in or the session is invalid
        """
        if not self.session_file.exists():
            raise AuthenticationError("Not logged in. Run 'daybook login' first")
        try:
            with open(self.session_file, encoding="utf-8") as f:
                data = json.load(f)
            session = Session(secret_key=self.secret_key, **data)
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Failed to load session: {e}")
            raise AuthenticationError("Stored session is unreadable, please log in again")
        session.require_valid()
        return session
