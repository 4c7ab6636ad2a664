# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Role editor: owns a role's grant list while the operator edits it."""

import logging
import uuid

from pydantic import TypeAdapter

from src.client.api import AdminApiClient, AdminApiError
from src.client.notifications import (
    LoggingNotifier,
    Notification,
    NotificationLevel,
    Notifier,
)
from src.rbac.catalog import CatalogView, ViewCatalog
from src.rbac.grants import PermissionGrant
from src.rbac.selection import PermissionSelection
from src.schemas.rbac import RoleWithGrantsSchema
from src.services.loading import LoadingTracker

logger = logging.getLogger(__name__)

_catalog_adapter = TypeAdapter(list[CatalogView])


class RoleEditor:
    """Loads a role, lets a :class:`PermissionSelection` edit it, saves it back."""

    def __init__(
        self,
        api: AdminApiClient,
        role_id: uuid.UUID,
        catalog: ViewCatalog | None = None,
        notifier: Notifier | None = None,
        loading: LoadingTracker | None = None,
    ) -> None:
        self.api = api
        self.role_id = role_id
        self.catalog = catalog
        self.notifier = notifier or LoggingNotifier()
        self.loading = loading or LoadingTracker()
        self.role: RoleWithGrantsSchema | None = None
        self.grants: list[PermissionGrant] = []
        self.selection: PermissionSelection | None = None
        self.dirty = False

    async def load(self) -> bool:
        """Fetch the role (and the catalog when none was given)."""
        with self.loading.track("roles.load"):
            try:
                if self.catalog is None:
                    response = await self.api.request("GET", "/rbac/catalog")
                    self.catalog = ViewCatalog(
                        _catalog_adapter.validate_python(response.json())
                    )
                response = await self.api.request("GET", f"/rbac/roles/{self.role_id}")
                role = RoleWithGrantsSchema.model_validate(response.json())
            except (AdminApiError, ValueError) as e:
                logger.error(f"Could not load role {self.role_id}: {e}")
                self._notify_error("Could not load role", str(e))
                return False

        self.role = role
        self.grants = list(role.grants)
        self.dirty = False
        self.selection = PermissionSelection(
            self.catalog, self.grants, on_change=self._on_change
        )
        return True

    def _on_change(self, grants: list[PermissionGrant]) -> None:
        self.grants = grants
        self.dirty = True
        # Echo the published list back, as the owner of the list does
        if self.selection is not None:
            self.selection.sync(grants)

    async def save(self) -> bool:
        """Replace the role's grants on the server with the edited list."""
        if self.role is None:
            return False
        payload = {
            "grants": [
                g.model_dump(mode="json", by_alias=True) for g in self.grants
            ]
        }
        with self.loading.track("roles.save"):
            try:
                response = await self.api.request(
                    "PUT", f"/rbac/roles/{self.role_id}/grants", json=payload
                )
                role = RoleWithGrantsSchema.model_validate(response.json())
            except (AdminApiError, ValueError) as e:
                logger.error(f"Could not save role {self.role_id}: {e}")
                self._notify_error("Could not save permissions", str(e))
                return False

        self.role = role
        self.grants = list(role.grants)
        self.dirty = False
        if self.selection is not None:
            self.selection.sync(self.grants)
        self.notifier.notify(
            Notification(
                NotificationLevel.SUCCESS,
                "Success",
                f"Permissions of {role.name} saved",
            )
        )
        return True

    def _notify_error(self, title: str, message: str) -> None:
        self.notifier.notify(Notification(NotificationLevel.ERROR, title, message))
