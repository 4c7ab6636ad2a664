# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Cached user list behind the user administration screen.

Every successful create, update or delete marks the cached list stale and
re-fetches it. Failures are reported through the notifier and logged; the
last known list stays in place.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from src.client.api import NO_CACHE_HEADERS, AdminApiClient, AdminApiError
from src.client.notifications import (
    LoggingNotifier,
    Notification,
    NotificationLevel,
    Notifier,
)
from src.schemas.user import UserCreate, UserResponse, UserUpdate
from src.services.loading import LoadingTracker

logger = logging.getLogger(__name__)

_users_adapter = TypeAdapter(list[UserResponse])


class UserDirectoryError(Exception):
    """The user list could not be loaded."""


@dataclass
class MutationResult:
    """Outcome of a create, update or delete.

    ``errors`` maps form fields to messages when local validation failed and
    nothing was sent. ``message`` carries the server's reason on failure.
    """

    success: bool
    errors: dict[str, str] = field(default_factory=dict)
    message: str | None = None


def form_errors(error: ValidationError) -> dict[str, str]:
    """Map pydantic errors to ``{field: message}``, first message per field."""
    errors: dict[str, str] = {}
    for err in error.errors():
        name = ".".join(str(part) for part in err["loc"]) or "__root__"
        errors.setdefault(name, err["msg"])
    return errors


def user_matches(user: UserResponse, term: str) -> bool:
    """Search rule of the user table.

    Names, email and username match case-insensitively; the identification
    number matches as typed.
    """
    if not term:
        return True
    needle = term.lower()
    full_name = " ".join(
        part
        for part in (
            user.first_name,
            user.middle_name,
            user.last_name,
            user.second_last_name,
        )
        if part
    )
    return (
        needle in full_name.lower()
        or needle in user.email.lower()
        or needle in user.username.lower()
        or term in user.identification
    )


class UserDirectory:
    """Client-side state of the user administration screen."""

    def __init__(
        self,
        api: AdminApiClient,
        notifier: Notifier | None = None,
        loading: LoadingTracker | None = None,
    ) -> None:
        self.api = api
        self.notifier = notifier or LoggingNotifier()
        self.loading = loading or LoadingTracker()
        self._users: list[UserResponse] = []
        self._stale = True

    @property
    def users(self) -> list[UserResponse]:
        """The last successfully fetched list."""
        return list(self._users)

    @property
    def is_stale(self) -> bool:
        return self._stale

    async def fetch(self) -> list[UserResponse]:
        """Return the user list, fetching it when the cache is stale.

        Raises:
            UserDirectoryError: If the list cannot be loaded.
        """
        if not self._stale:
            return self.users

        with self.loading.track("users.fetch"):
            try:
                response = await self.api.request(
                    "GET", "/users", headers=NO_CACHE_HEADERS
                )
                users = _users_adapter.validate_python(response.json())
            except AdminApiError as e:
                raise UserDirectoryError(f"Failed to load users: {e}") from e
            except ValueError as e:
                logger.error(f"Unexpected user list payload: {e}")
                raise UserDirectoryError(f"Failed to load users: {e}") from e

        self._users = users
        self._stale = False
        logger.debug(f"Loaded {len(users)} users")
        return self.users

    def invalidate(self) -> None:
        """Mark the cached list stale; the next fetch goes to the server."""
        self._stale = True

    async def refresh(self) -> bool:
        """Re-fetch the list. On failure the last known list is kept."""
        self.invalidate()
        try:
            await self.fetch()
        except UserDirectoryError as e:
            logger.error(str(e))
            self._notify_error("Could not load users", str(e))
            return False
        return True

    def filter(self, term: str) -> list[UserResponse]:
        """Users in the cached list matching the search term."""
        return [u for u in self._users if user_matches(u, term)]

    async def create(self, data: dict[str, Any]) -> MutationResult:
        """Validate and submit the create user form."""
        try:
            form = UserCreate.model_validate(data)
        except ValidationError as e:
            return MutationResult(success=False, errors=form_errors(e))
        return await self._mutate(
            "POST",
            "/users",
            form,
            success_message=f"User {form.username} created",
            failure_title="Could not create user",
        )

    async def update(self, user_id: uuid.UUID, data: dict[str, Any]) -> MutationResult:
        """Validate and submit the edit user form.

        A missing or empty password keeps the user's current password.
        """
        try:
            form = UserUpdate.model_validate(data)
        except ValidationError as e:
            return MutationResult(success=False, errors=form_errors(e))
        return await self._mutate(
            "PUT",
            f"/users/{user_id}",
            form,
            success_message=f"User {form.username} updated",
            failure_title="Could not update user",
        )

    async def delete(self, user_id: uuid.UUID) -> MutationResult:
        return await self._mutate(
            "DELETE",
            f"/users/{user_id}",
            None,
            success_message="User deleted",
            failure_title="Could not delete user",
        )

    async def _mutate(
        self,
        method: str,
        path: str,
        form: BaseModel | None,
        success_message: str,
        failure_title: str,
    ) -> MutationResult:
        payload = form.model_dump(mode="json", exclude_none=True) if form else None
        with self.loading.track(f"users.{method.lower()}"):
            try:
                await self.api.request(method, path, json=payload)
            except AdminApiError as e:
                logger.error(f"{failure_title}: {e}")
                self._notify_error(failure_title, str(e))
                return MutationResult(success=False, message=str(e))

        await self.refresh()
        self.notifier.notify(
            Notification(NotificationLevel.SUCCESS, "Success", success_message)
        )
        return MutationResult(success=True)

    def _notify_error(self, title: str, message: str) -> None:
        self.notifier.notify(Notification(NotificationLevel.ERROR, title, message))
