"""Backend interface for authentication and row storage.

A backend owns user accounts and two row collections per user:

- entries: ``id, date, type, content, value, start_time, end_time``
- options: ``id, type, content``

Every data call takes the id of an authenticated user. Implementations
raise BackendError when a request fails and AuthenticationError when
credentials are rejected.
"""

from abc import ABC, abstractmethod
from typing import Any

ENTRY_FIELDS = ["id", "date", "type", "content", "value", "start_time", "end_time"]
OPTION_FIELDS = ["id", "type", "content"]


class Backend(ABC):
    """Request/response backend for accounts, entries and saved options."""

    @abstractmethod
    def sign_up(self, email: str, password: str) -> str:
        """Create an account.

        Returns:
            New user id

        Raises:
            AuthenticationError: If the email is taken or input is invalid
        """
        pass

    @abstractmethod
    def authenticate(self, email: str, password: str) -> str:
        """Check credentials.

        Returns:
            User id

        Raises:
            AuthenticationError: If the credentials are wrong
        """
        pass

    @abstractmethod
    def list_entries(self, user_id: str) -> list[dict[str, Any]]:
        """List all entry rows of a user in creation order."""
        pass

    @abstractmethod
    def insert_entry(self, user_id: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert an entry row.

        The row's ``id`` is ignored; the backend assigns one.

        Returns:
            The stored row including its assigned id
        """
        pass

    @abstractmethod
    def update_entry(self, user_id: str, entry_id: str, row: dict[str, Any]) -> dict[str, Any]:
        """Replace the fields of an existing entry row.

        Raises:
            BackendError: If no such entry exists
        """
        pass

    @abstractmethod
    def delete_entry(self, user_id: str, entry_id: str) -> None:
        """Delete an entry row.

        Raises:
            BackendError: If no such entry exists
        """
        pass

    @abstractmethod
    def list_options(self, user_id: str) -> list[dict[str, Any]]:
        """List saved option rows of a user in creation order."""
        pass

    @abstractmethod
    def insert_option(self, user_id: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert a saved option row and return it with its assigned id."""
        pass

    @abstractmethod
    def delete_option(self, user_id: str, option_id: str) -> None:
        """Delete a saved option row.

        Raises:
            BackendError: If no such option exists
        """
        pass
