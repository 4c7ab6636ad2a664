# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for the role editor client."""

import json
import uuid

import pytest
import pytest_asyncio
import respx
from httpx import Response

from src.client.api import AdminApiClient
from src.client.notifications import NotificationLevel, RecordingNotifier
from src.client.role_editor import RoleEditor

BASE_URL = "http://admin.test/api/v1"
ROLE_ID = uuid.uuid4()
ROLE_URL = f"{BASE_URL}/rbac/roles/{ROLE_ID}"


def role_json(grants):
    return {
        "id": str(ROLE_ID),
        "name": "Clerk",
        "description": None,
        "is_system": False,
        "is_active": True,
        "grants": grants,
    }


@pytest_asyncio.fixture
async def api():
    client = AdminApiClient(BASE_URL)
    yield client
    await client.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@respx.mock
@pytest.mark.asyncio
async def test_load_fetches_catalog_and_role(api, notifier, small_catalog):
    catalog_json = [view.model_dump() for view in small_catalog]
    catalog_route = respx.get(f"{BASE_URL}/rbac/catalog").mock(
        return_value=Response(200, json=catalog_json)
    )
    respx.get(ROLE_URL).mock(
        return_value=Response(
            200,
            json=role_json([{"viewId": "V2", "viewName": "View Two", "actions": None}]),
        )
    )
    editor = RoleEditor(api, ROLE_ID, notifier=notifier)

    assert await editor.load() is True

    assert catalog_route.call_count == 1
    assert [v.code for v in editor.catalog] == ["V1", "V2", "inventory"]
    # Missing action lists are normalized once when the selection takes over
    assert editor.grants[0].actions == ()
    assert editor.dirty is True


@respx.mock
@pytest.mark.asyncio
async def test_load_failure_is_reported(api, notifier, small_catalog):
    respx.get(ROLE_URL).mock(return_value=Response(404, json={"detail": "Role not found"}))
    editor = RoleEditor(api, ROLE_ID, catalog=small_catalog, notifier=notifier)

    assert await editor.load() is False

    assert editor.selection is None
    assert notifier.errors[-1].message == "Role not found"


@respx.mock
@pytest.mark.asyncio
async def test_edit_and_save(api, notifier, small_catalog):
    respx.get(ROLE_URL).mock(
        return_value=Response(
            200,
            json=role_json([{"viewId": "V1", "viewName": "View One", "actions": ["edit"]}]),
        )
    )
    saved = role_json(
        [
            {"viewId": "V1", "viewName": "View One", "actions": ["edit", "export"]},
            {"viewId": "V2", "viewName": "View Two", "actions": ["view"]},
        ]
    )
    put = respx.put(f"{ROLE_URL}/grants").mock(return_value=Response(200, json=saved))
    editor = RoleEditor(api, ROLE_ID, catalog=small_catalog, notifier=notifier)
    await editor.load()
    assert editor.dirty is False

    editor.selection.toggle_action("V1", "export")
    editor.selection.add_view("V2")
    editor.selection.toggle_action("V2", "view")
    assert editor.dirty is True

    assert await editor.save() is True

    body = json.loads(put.calls.last.request.content)
    assert body == {
        "grants": [
            {"viewId": "V1", "viewName": "View One", "actions": ["edit", "export"]},
            {"viewId": "V2", "viewName": "View Two", "actions": ["view"]},
        ]
    }
    assert editor.dirty is False
    assert editor.selection.summary().action_count == 3
    success = notifier.notifications[-1]
    assert success.level is NotificationLevel.SUCCESS
    assert success.message == "Permissions of Clerk saved"


@respx.mock
@pytest.mark.asyncio
async def test_failed_save_keeps_edits(api, notifier, small_catalog):
    respx.get(ROLE_URL).mock(return_value=Response(200, json=role_json([])))
    respx.put(f"{ROLE_URL}/grants").mock(
        return_value=Response(403, json={"detail": "System roles cannot be modified"})
    )
    editor = RoleEditor(api, ROLE_ID, catalog=small_catalog, notifier=notifier)
    await editor.load()
    editor.selection.add_view("inventory")

    assert await editor.save() is False

    assert editor.dirty is True
    assert [g.view_id for g in editor.grants] == ["inventory"]
    assert notifier.errors[-1].title == "Could not save permissions"


@pytest.mark.asyncio
async def test_save_before_load_does_nothing(api, small_catalog):
    editor = RoleEditor(api, ROLE_ID, catalog=small_catalog)
    assert await editor.save() is False
