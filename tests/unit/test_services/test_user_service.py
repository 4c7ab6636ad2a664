# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for user_service."""

import uuid

import pytest
from pydantic import ValidationError

from src.schemas.user import UserCreate, UserUpdate
from src.security import verify_password
from src.services import rbac_service, user_service
from src.services.rbac_seed_service import seed_rbac_data


@pytest.fixture
def viewer_role(db_session):
    seed_rbac_data(db_session)
    return rbac_service.get_role_by_name(db_session, "Viewer")


def user_form(role_ids, **overrides) -> dict:
    data = {
        "identification": "0102030405",
        "first_name": "Jane",
        "middle_name": "Q",
        "last_name": "Doe",
        "second_last_name": "Roe",
        "phone": "555-0100",
        "email": "jane@example.com",
        "username": "jane.doe",
        "password": "secret1",
        "profile_ids": [str(r) for r in role_ids],
        "company_ids": [],
    }
    data.update(overrides)
    return data


class TestSchemas:
    """Tests for the user form rules."""

    def test_create_requires_profile(self):
        with pytest.raises(ValidationError) as exc:
            UserCreate.model_validate(user_form([]))
        assert exc.value.errors()[0]["loc"] == ("profile_ids",)

    def test_create_password_min_length(self):
        with pytest.raises(ValidationError):
            UserCreate.model_validate(user_form([uuid.uuid4()], password="12345"))

    def test_username_characters(self):
        with pytest.raises(ValidationError):
            UserCreate.model_validate(user_form([uuid.uuid4()], username="jane doe"))

    def test_update_empty_password_means_unchanged(self):
        form = UserUpdate.model_validate(user_form([uuid.uuid4()], password=""))
        assert form.password is None

    def test_update_short_password_rejected(self):
        with pytest.raises(ValidationError):
            UserUpdate.model_validate(user_form([uuid.uuid4()], password="abc"))


class TestCreateUser:
    """Tests for creating users."""

    def test_creates_user_with_profiles_and_companies(
        self, db_session, viewer_role, company
    ):
        form = UserCreate.model_validate(
            user_form([viewer_role.id], company_ids=[str(company.id)])
        )

        user = user_service.create_user(db_session, form)

        assert verify_password("secret1", user.hashed_password)
        response = user_service.to_response(db_session, user)
        assert [p.name for p in response.profiles] == ["Viewer"]
        assert response.company_ids == [company.id]
        assert response.middle_name == "Q"

    def test_duplicate_username(self, db_session, viewer_role, user_factory):
        user_factory("jane.doe")
        form = UserCreate.model_validate(user_form([viewer_role.id]))

        with pytest.raises(user_service.UserConflictError, match="Username"):
            user_service.create_user(db_session, form)

    def test_duplicate_email(self, db_session, viewer_role, user_factory):
        user_factory("someone", email="jane@example.com")
        form = UserCreate.model_validate(user_form([viewer_role.id]))

        with pytest.raises(user_service.UserConflictError, match="Email"):
            user_service.create_user(db_session, form)

    def test_unknown_profile(self, db_session):
        form = UserCreate.model_validate(user_form([uuid.uuid4()]))

        with pytest.raises(user_service.UnknownReferenceError, match="Profile"):
            user_service.create_user(db_session, form)

    def test_unknown_company(self, db_session, viewer_role):
        form = UserCreate.model_validate(
            user_form([viewer_role.id], company_ids=[str(uuid.uuid4())])
        )

        with pytest.raises(user_service.UnknownReferenceError, match="Company"):
            user_service.create_user(db_session, form)


class TestUpdateUser:
    """Tests for editing users."""

    def test_empty_password_keeps_current(self, db_session, viewer_role):
        user = user_service.create_user(
            db_session, UserCreate.model_validate(user_form([viewer_role.id]))
        )
        old_hash = user.hashed_password

        updated = user_service.update_user(
            db_session,
            user,
            UserUpdate.model_validate(
                user_form([viewer_role.id], password="", first_name="Janet")
            ),
        )

        assert updated.first_name == "Janet"
        assert updated.hashed_password == old_hash

    def test_new_password_and_profiles(self, db_session, viewer_role):
        operator = rbac_service.get_role_by_name(db_session, "Operator")
        user = user_service.create_user(
            db_session, UserCreate.model_validate(user_form([viewer_role.id]))
        )

        updated = user_service.update_user(
            db_session,
            user,
            UserUpdate.model_validate(
                user_form([operator.id], password="changed1", is_active=False)
            ),
        )

        assert verify_password("changed1", updated.hashed_password)
        assert updated.is_active is False
        assert [r.name for r in rbac_service.get_user_roles(db_session, updated)] == [
            "Operator"
        ]

    def test_keeping_own_username_is_not_a_conflict(self, db_session, viewer_role):
        user = user_service.create_user(
            db_session, UserCreate.model_validate(user_form([viewer_role.id]))
        )

        updated = user_service.update_user(
            db_session, user, UserUpdate.model_validate(user_form([viewer_role.id]))
        )

        assert updated.username == "jane.doe"


def test_list_and_delete(db_session, user_factory):
    user_factory("bob")
    alice = user_factory("alice")

    assert [u.username for u in user_service.list_users(db_session)] == [
        "alice",
        "bob",
    ]

    alice_id = alice.id
    user_service.delete_user(db_session, alice)

    assert user_service.get_user(db_session, alice_id) is None
