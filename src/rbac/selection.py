# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Editing model for the views and actions granted to a role.

The owner of the grant list (the role editor) hands the current list to a
:class:`PermissionSelection` and receives every change as a complete new
list through the ``on_change`` callback. The selection keeps only transient
state of its own: the pending view picked in the "add view" selector and the
free-text filter.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from src.rbac.catalog import CatalogAction, CatalogView, ViewCatalog
from src.rbac.grants import PermissionGrant, needs_normalization, normalize_grants

logger = logging.getLogger(__name__)

GrantsCallback = Callable[[list[PermissionGrant]], None]


@dataclass(frozen=True)
class ActionToggle:
    """One action of a view together with whether it is granted."""

    code: str
    name: str
    selected: bool


@dataclass(frozen=True)
class ActionLayout:
    """Actions of a granted view split into toggle switches and extra actions."""

    view: CatalogView
    primary: list[ActionToggle] = field(default_factory=list)
    overflow: list[ActionToggle] = field(default_factory=list)


@dataclass(frozen=True)
class SelectionSummary:
    view_count: int
    action_count: int


class PermissionSelection:
    """Add, remove and toggle view actions for a single role.

    Every mutating method returns True when it published a new list and
    False when the request was ignored (empty or unknown view, view already
    granted, view not granted).
    """

    def __init__(
        self,
        catalog: ViewCatalog,
        grants: Iterable[PermissionGrant],
        on_change: GrantsCallback,
    ) -> None:
        self._catalog = catalog
        self._on_change = on_change
        self._grants: list[PermissionGrant] = []
        self._last_external: list[PermissionGrant] | None = None
        self.pending_view = ""
        self.filter_text = ""
        self.sync(grants)

    @property
    def grants(self) -> list[PermissionGrant]:
        return list(self._grants)

    def sync(self, grants: Iterable[PermissionGrant]) -> bool:
        """Take over a grant list supplied by the owner.

        Lists with grants missing their actions are normalized and published
        once per new list from the owner; handing over the same list again
        does nothing. Receiving back a list this selection published is also
        a no-op, so the owner may feed every published list straight back in.
        """
        grants = list(grants)
        if grants == self._last_external:
            return False
        self._last_external = grants
        if grants == self._grants:
            return False
        self._grants = grants
        if not needs_normalization(grants):
            return False
        logger.debug("Normalizing grants without action lists")
        self._publish(normalize_grants(grants))
        return True

    def add_view(self, view_id: str | None = None) -> bool:
        """Grant a catalog view with no actions; defaults to the pending view."""
        if view_id is None:
            view_id = self.pending_view
        if not view_id:
            return False

        view = self._catalog.get(view_id)
        if view is None:
            return False
        if self._find(view_id) is not None:
            return False

        grant = PermissionGrant(view_id=view.code, view_name=view.name, actions=())
        self._publish([*self._grants, grant])
        self.pending_view = ""
        return True

    def remove_view(self, view_id: str) -> bool:
        if self._find(view_id) is None:
            return False
        self._publish([g for g in self._grants if g.view_id != view_id])
        return True

    def toggle_action(self, view_id: str, action_code: str) -> bool:
        """Grant the action if it is missing, revoke it if present."""
        if self._find(view_id) is None:
            return False

        updated = []
        for grant in self._grants:
            if grant.view_id == view_id:
                current = grant.actions or ()
                if action_code in current:
                    actions = tuple(a for a in current if a != action_code)
                else:
                    actions = (*current, action_code)
                grant = grant.model_copy(update={"actions": actions})
            updated.append(grant)

        self._publish(updated)
        return True

    def available_views(self) -> list[CatalogView]:
        """Catalog views that can still be added."""
        granted = {g.view_id for g in self._grants}
        return [v for v in self._catalog if v.code not in granted]

    def filtered_grants(self) -> list[PermissionGrant]:
        """Grants whose view name contains the filter text, ignoring case."""
        needle = self.filter_text.lower()
        return [g for g in self._grants if needle in (g.view_name or "").lower()]

    def action_layout(self, view_id: str) -> ActionLayout | None:
        """Toggle rows for a granted view, or None if it cannot be shown."""
        grant = self._find(view_id)
        view = self._catalog.get(view_id)
        if grant is None or view is None:
            return None

        def toggles(actions: tuple[CatalogAction, ...]) -> list[ActionToggle]:
            return [
                ActionToggle(code=a.code, name=a.name, selected=grant.has_action(a.code))
                for a in actions
            ]

        return ActionLayout(
            view=view,
            primary=toggles(view.primary_actions),
            overflow=toggles(view.overflow_actions),
        )

    def summary(self) -> SelectionSummary:
        return SelectionSummary(
            view_count=len(self._grants),
            action_count=sum(len(g.actions or ()) for g in self._grants),
        )

    def _find(self, view_id: str) -> PermissionGrant | None:
        for grant in self._grants:
            if grant.view_id == view_id:
                return grant
        return None

    def _publish(self, grants: list[PermissionGrant]) -> None:
        self._grants = grants
        self._on_change(list(grants))
