# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Static catalog of system views and the actions that can be granted on them.

The catalog is read once from a JSON file shaped like::

    [{"code": "users", "name": "Users",
      "actions": [{"code": "edit", "name": "Edit"}, ...]}, ...]

Action order is significant: the first ``PRIMARY_ACTION_SLOTS`` actions of a
view are shown as toggle switches, the rest in an "additional actions" list.
"""

import logging
from collections.abc import Iterable, Iterator
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from src.config import DEFAULT_CATALOG_PATH, settings

logger = logging.getLogger(__name__)

PRIMARY_ACTION_SLOTS = 3
PERMISSION_CODE_SEPARATOR = "."


class CatalogError(Exception):
    """The catalog file is missing or malformed."""


class CatalogAction(BaseModel):
    """An action that can be granted on a view."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., min_length=1)
    name: str


class CatalogView(BaseModel):
    """A screen or feature area of the system."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., min_length=1)
    name: str
    actions: tuple[CatalogAction, ...] = ()

    @property
    def action_codes(self) -> list[str]:
        return [a.code for a in self.actions]

    @property
    def primary_actions(self) -> tuple[CatalogAction, ...]:
        return self.actions[:PRIMARY_ACTION_SLOTS]

    @property
    def overflow_actions(self) -> tuple[CatalogAction, ...]:
        return self.actions[PRIMARY_ACTION_SLOTS:]

    def has_action(self, action_code: str) -> bool:
        return any(a.code == action_code for a in self.actions)


def make_permission_code(view_code: str, action_code: str) -> str:
    """Build the permission code stored for an action granted on a view."""
    return f"{view_code}{PERMISSION_CODE_SEPARATOR}{action_code}"


def split_permission_code(code: str) -> tuple[str, str]:
    """Split a permission code into its view and action codes."""
    view_code, _, action_code = code.partition(PERMISSION_CODE_SEPARATOR)
    return view_code, action_code


class ViewCatalog:
    """Ordered, read-only collection of catalog views."""

    def __init__(self, views: Iterable[CatalogView]) -> None:
        self._views: dict[str, CatalogView] = {}
        for view in views:
            if view.code in self._views:
                raise CatalogError(f"Duplicate view code in catalog: {view.code}")
            if PERMISSION_CODE_SEPARATOR in view.code:
                raise CatalogError(
                    f"View code must not contain '{PERMISSION_CODE_SEPARATOR}': {view.code}"
                )
            if len(set(view.action_codes)) != len(view.actions):
                raise CatalogError(f"Duplicate action code in view: {view.code}")
            self._views[view.code] = view

    def __iter__(self) -> Iterator[CatalogView]:
        return iter(self._views.values())

    def __len__(self) -> int:
        return len(self._views)

    def __contains__(self, view_code: object) -> bool:
        return view_code in self._views

    def get(self, view_code: str) -> CatalogView | None:
        """Get a view by code, or None when the catalog does not know it."""
        return self._views.get(view_code)

    def permission_codes(self) -> list[str]:
        """All ``<view>.<action>`` codes, in catalog order."""
        return [
            make_permission_code(view.code, action.code)
            for view in self
            for action in view.actions
        ]

    def is_known_permission(self, code: str) -> bool:
        view_code, action_code = split_permission_code(code)
        view = self.get(view_code)
        return view is not None and view.has_action(action_code)


_views_adapter = TypeAdapter(list[CatalogView])


def parse_catalog(raw: str | bytes) -> ViewCatalog:
    """Parse catalog JSON text."""
    try:
        views = _views_adapter.validate_json(raw)
    except ValidationError as e:
        raise CatalogError(f"Invalid catalog: {e}") from e
    return ViewCatalog(views)


def load_catalog(path: Path) -> ViewCatalog:
    """Load the catalog from a JSON file."""
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise CatalogError(f"Cannot read catalog file {path}: {e}") from e
    catalog = parse_catalog(raw)
    logger.info(f"Loaded {len(catalog)} views from catalog {path}")
    return catalog


@lru_cache
def get_catalog() -> ViewCatalog:
    """Get the application catalog, loading it on first use."""
    return load_catalog(Path(settings.catalog_path))
