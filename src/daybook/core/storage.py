"""CSV-backed row store with atomic writes and file locking."""

import csv
import hashlib
import hmac
import logging
import os
import secrets
import shutil
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional
from uuid import uuid4

from daybook.core.backend import ENTRY_FIELDS, OPTION_FIELDS, Backend
from daybook.core.errors import AuthenticationError, BackendError

logger = logging.getLogger(__name__)

ENTRY_COLUMNS = [*ENTRY_FIELDS, "user_id", "created_at"]
OPTION_COLUMNS = [*OPTION_FIELDS, "user_id", "created_at"]
USER_COLUMNS = ["id", "email", "password_hash", "salt", "created_at"]

PBKDF2_ITERATIONS = 200_000
MIN_PASSWORD_LENGTH = 6


def _lock_file(file_obj: Any, exclusive: bool = True) -> None:
    """Lock a file in a cross-platform way.

    Args:
        file_obj: File object to lock
        exclusive: If True, acquire exclusive lock; if False, acquire shared lock
    """
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        mode = msvcrt.LK_NBLCK if exclusive else msvcrt.LK_NBRLCK
        msvcrt.locking(file_obj.fileno(), mode, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        mode = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(file_obj.fileno(), mode)


def _unlock_file(file_obj: Any) -> None:
    """Unlock a file in a cross-platform way."""
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        msvcrt.locking(file_obj.fileno(), msvcrt.LK_UNLCK, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        fcntl.flock(file_obj.fileno(), fcntl.LOCK_UN)


def hash_password(password: str, salt: str) -> str:
    """Hash a password with PBKDF2-SHA256."""
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), bytes.fromhex(salt), PBKDF2_ITERATIONS
    )
    return digest.hex()


class CSVBackend(Backend):
    """Backend storing users, entries and saved options in CSV files."""

    def __init__(self, data_dir: Optional[Path] = None):
        """Initialize the row store.

        Args:
            data_dir: Custom data directory. Defaults to ~/.daybook/data
        """
        if data_dir is None:
            data_dir = Path.home() / ".daybook" / "data"

        self.data_dir = Path(data_dir)
        self.entries_file = self.data_dir / "entries.csv"
        self.options_file = self.data_dir / "options.csv"
        self.users_file = self.data_dir / "users.csv"
        self.state_dir = self.data_dir.parent / "state"
        self.backup_dir = self.data_dir.parent / "backups"

        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.state_dir.mkdir(parents=True, exist_ok=True)
        self.backup_dir.mkdir(parents=True, exist_ok=True)

        self._initialize_files()

    def _initialize_files(self) -> None:
        """Create CSV files with headers if they don't exist."""
        for path, columns in (
            (self.entries_file, ENTRY_COLUMNS),
            (self.options_file, OPTION_COLUMNS),
            (self.users_file, USER_COLUMNS),
        ):
            if not path.exists():
                self._write_csv_atomic(path, columns, [])

    def _write_csv_atomic(
        self, file_path: Path, fieldnames: list[str], rows: list[dict[str, Any]]
    ) -> None:
        """Write CSV file atomically using temporary file and rename.

        Raises:
            BackendError: If the file cannot be written
        """
        temp_file = file_path.with_suffix(".tmp")

        try:
            with open(temp_file, "w", newline="", encoding="utf-8") as f:
                _lock_file(f, exclusive=True)

                writer = csv.DictWriter(f, fieldnames=fieldnames)
                writer.writeheader()
                writer.writerows(rows)

                f.flush()
                os.fsync(f.fileno())

                _unlock_file(f)

            temp_file.replace(file_path)

        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            logger.error(f"Failed to write {file_path}: {e}")
            raise BackendError(f"Failed to write {file_path.name}: {e}")

    def _read_csv(self, file_path: Path) -> list[dict[str, Any]]:
        """Read CSV file with a shared lock.

        Raises:
            BackendError: If the file cannot be read
        """
        if not file_path.exists():
            return []

        try:
            with open(file_path, newline="", encoding="utf-8") as f:
                _lock_file(f, exclusive=False)
                try:
                    rows = list(csv.DictReader(f))
                finally:
                    _unlock_file(f)
        except OSError as e:
            logger.error(f"Failed to read {file_path}: {e}")
            raise BackendError(f"Failed to read {file_path.name}: {e}")

        return rows

    def backup(self, label: Optional[str] = None) -> Path:
        """Create backup of all data files.

        Args:
            label: Optional label for backup. Defaults to timestamp

        Returns:
            Path to backup directory
        """
        if label is None:
            label = datetime.now().strftime("%Y%m%d_%H%M%S")

        backup_path = self.backup_dir / label
        backup_path.mkdir(parents=True, exist_ok=True)

        for file in [self.entries_file, self.options_file, self.users_file]:
            if file.exists():
                shutil.copy2(file, backup_path / file.name)

        logger.info(f"Backup written to {backup_path}")
        return backup_path

    # Accounts

    def sign_up(self, email: str, password: str) -> str:
        email = email.strip().lower()
        if "@" not in email:
            raise AuthenticationError(f"Invalid email address: {email}")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthenticationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        users = self._read_csv(self.users_file)
        if any(u["email"] == email for u in users):
            raise AuthenticationError(f"An account already exists for {email}")

        salt = secrets.token_hex(16)
        user = {
            "id": str(uuid4()),
            "email": email,
            "password_hash": hash_password(password, salt),
            "salt": salt,
            "created_at": datetime.now().isoformat(),
        }
        users.append(user)
        self._write_csv_atomic(self.users_file, USER_COLUMNS, users)
        logger.info(f"Created account for {email}")
        return user["id"]  # type: ignore[no-any-return]

    def authenticate(self, email: str, password: str) -> str:
        email = email.strip().lower()
        for user in self._read_csv(self.users_file):
            if user["email"] != email:
                continue
            expected = user["password_hash"]
            if hmac.compare_digest(hash_password(password, user["salt"]), expected):
                return user["id"]  # type: ignore[no-any-return]
            break
        raise AuthenticationError("Invalid email or password")

    # Entries

    def list_entries(self, user_id: str) -> list[dict[str, Any]]:
        rows = [r for r in self._read_csv(self.entries_file) if r["user_id"] == user_id]
        # Stable: rows created in the same instant keep file order
        rows.sort(key=lambda r: r["created_at"])
        return [{k: r[k] for k in ENTRY_FIELDS} for r in rows]

    def insert_entry(self, user_id: str, row: dict[str, Any]) -> dict[str, Any]:
        rows = self._read_csv(self.entries_file)
        stored = {k: row.get(k, "") for k in ENTRY_FIELDS}
        stored["id"] = str(uuid4())
        rows.append({**stored, "user_id": user_id, "created_at": datetime.now().isoformat()})
        self._write_csv_atomic(self.entries_file, ENTRY_COLUMNS, rows)
        logger.debug(f"Inserted {stored['type']} entry {stored['id']}")
        return stored

    def update_entry(self, user_id: str, entry_id: str, row: dict[str, Any]) -> dict[str, Any]:
        rows = self._read_csv(self.entries_file)
        for i, existing in enumerate(rows):
            if existing["id"] == entry_id and existing["user_id"] == user_id:
                updated = {k: row.get(k, existing[k]) for k in ENTRY_FIELDS}
                updated["id"] = entry_id
                rows[i] = {**existing, **updated}
                self._write_csv_atomic(self.entries_file, ENTRY_COLUMNS, rows)
                logger.debug(f"Updated entry {entry_id}")
                return updated
        raise BackendError(f"Entry not found: {entry_id}")

    def delete_entry(self, user_id: str, entry_id: str) -> None:
        rows = self._read_csv(self.entries_file)
        remaining = [
            r for r in rows if not (r["id"] == entry_id and r["user_id"] == user_id)
        ]
        if len(remaining) == len(rows):
            raise BackendError(f"Entry not found: {entry_id}")
        self._write_csv_atomic(self.entries_file, ENTRY_COLUMNS, remaining)
        logger.debug(f"Deleted entry {entry_id}")

    # Saved options

    def list_options(self, user_id: str) -> list[dict[str, Any]]:
        rows = [r for r in self._read_csv(self.options_file) if r["user_id"] == user_id]
        rows.sort(key=lambda r: r["created_at"])
        return [{k: r[k] for k in OPTION_FIELDS} for r in rows]

    def insert_option(self, user_id: str, row: dict[str, Any]) -> dict[str, Any]:
        rows = self._read_csv(self.options_file)
        stored = {k: row.get(k, "") for k in OPTION_FIELDS}
        stored["id"] = str(uuid4())
        rows.append({**stored, "user_id": user_id, "created_at": datetime.now().isoformat()})
        self._write_csv_atomic(self.options_file, OPTION_COLUMNS, rows)
        return stored

    def delete_option(self, user_id: str, option_id: str) -> None:
        rows = self._read_csv(self.options_file)
        remaining = [
            r for r in rows if not (r["id"] == option_id and r["user_id"] == user_id)
        ]
        if len(remaining) == len(rows):
            raise BackendError(f"Option not found: {option_id}")
        self._write_csv_atomic(self.options_file, OPTION_COLUMNS, remaining)
