# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Per-view permission grants and their conversion to stored permission codes."""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.rbac.catalog import ViewCatalog, make_permission_code, split_permission_code


class PermissionGrant(BaseModel):
    """Actions granted on one view for the role being edited.

    ``actions`` keeps the order in which actions were granted and never
    holds the same code twice. It is ``None`` when a caller supplied a grant
    without an action list; see :func:`normalize_grants`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    view_id: str = Field(..., alias="viewId")
    view_name: str = Field(..., alias="viewName")
    actions: tuple[str, ...] | None = None

    @field_validator("actions")
    @classmethod
    def drop_duplicate_actions(
        cls, v: tuple[str, ...] | None
    ) -> tuple[str, ...] | None:
        if v is None:
            return None
        return tuple(dict.fromkeys(v))

    def has_action(self, action_code: str) -> bool:
        return action_code in (self.actions or ())


def needs_normalization(grants: Iterable[PermissionGrant]) -> bool:
    """True when any grant is missing its action list."""
    return any(g.actions is None for g in grants)


def normalize_grants(grants: Iterable[PermissionGrant]) -> list[PermissionGrant]:
    """Replace missing action lists with empty ones.

    Applying this twice gives the same result as applying it once.
    """
    return [
        g.model_copy(update={"actions": ()}) if g.actions is None else g
        for g in grants
    ]


def grants_to_permission_codes(
    grants: Iterable[PermissionGrant], catalog: ViewCatalog
) -> set[str]:
    """Permission codes for every granted action the catalog knows about.

    Unknown views and actions outside a view's catalog entry are dropped.
    """
    codes = set()
    for grant in grants:
        for action_code in grant.actions or ():
            code = make_permission_code(grant.view_id, action_code)
            if catalog.is_known_permission(code):
                codes.add(code)
    return codes


def permission_codes_to_grants(
    codes: Iterable[str], catalog: ViewCatalog
) -> list[PermissionGrant]:
    """Rebuild grants from stored permission codes.

    Grants come out in catalog view order, with actions in catalog action
    order. Codes the catalog does not know are ignored.
    """
    granted: dict[str, set[str]] = {}
    for code in codes:
        view_code, action_code = split_permission_code(code)
        granted.setdefault(view_code, set()).add(action_code)

    grants = []
    for view in catalog:
        actions = granted.get(view.code)
        if not actions:
            continue
        grants.append(
            PermissionGrant(
                view_id=view.code,
                view_name=view.name,
                actions=tuple(c for c in view.action_codes if c in actions),
            )
        )
    return grants
