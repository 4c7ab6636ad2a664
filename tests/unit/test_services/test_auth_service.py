# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for auth_service."""

import base64
import uuid
from datetime import datetime, timedelta

import pytest

from src.config import settings
from src.events import AppEvent, event_bus
from src.models import Company, UserCompany, VerificationCode
from src.models.session import Session as SessionModel
from src.security import verify_password as verify_local_hash
from src.services import auth_service
from src.services.auth_service import VerificationOutcome
from src.services.rbac_seed_service import seed_rbac_data


@pytest.fixture
def received_events():
    """Collect events published on the application bus during a test."""
    received = []

    def handler(payload):
        received.append(payload)

    for event_type in (AppEvent.VERIFICATION_CODE_CREATED, AppEvent.PASSWORD_RESET):
        event_bus.subscribe(event_type, handler, "tests")
    yield received
    for event_type in (AppEvent.VERIFICATION_CODE_CREATED, AppEvent.PASSWORD_RESET):
        event_bus.unsubscribe(event_type, handler, "tests")


def issue_code(db_session, email: str, received_events) -> str:
    result = auth_service.generate_verification_code(db_session, email)
    assert result.success is True
    return received_events[-1].data["code"]


class TestPasswordChain:
    """Tests for the ordered password verifiers."""

    def test_database_function_unavailable_falls_back(self, db_session, user_factory):
        user = user_factory(password="Secret123!")

        assert (
            auth_service.verify_with_database_function(
                db_session, "Secret123!", user.hashed_password
            )
            is VerificationOutcome.UNAVAILABLE
        )
        assert auth_service.check_password(db_session, "Secret123!", user.hashed_password)
        assert not auth_service.check_password(db_session, "wrong", user.hashed_password)

    def test_database_function_verdict_wins(
        self, db_session, user_factory, db_password_function
    ):
        user = user_factory(password="Secret123!")
        # The database knows a different password for this hash
        db_password_function[user.hashed_password] = "db-side-secret"

        assert auth_service.check_password(
            db_session, "db-side-secret", user.hashed_password
        )
        assert not auth_service.check_password(
            db_session, "Secret123!", user.hashed_password
        )

    def test_null_from_database_function_falls_back(
        self, db_session, user_factory, db_password_function
    ):
        user = user_factory(password="Secret123!")

        assert auth_service.check_password(db_session, "Secret123!", user.hashed_password)

    def test_database_function_disabled_by_setting(
        self, db_session, user_factory, db_password_function, monkeypatch
    ):
        user = user_factory(password="Secret123!")
        db_password_function[user.hashed_password] = "db-side-secret"
        monkeypatch.setattr(settings, "password_check_function", None)

        assert auth_service.check_password(db_session, "Secret123!", user.hashed_password)

    def test_reversible_encoding_never_accepted(self, db_session):
        encoded = base64.b64encode(b"Secret123!").decode()

        assert not auth_service.check_password(db_session, "Secret123!", encoded)
        assert not auth_service.check_password(db_session, "Secret123!", "Secret123!")

    def test_missing_hash_rejected(self, db_session):
        assert not auth_service.check_password(db_session, "anything", None)
        assert not auth_service.check_password(db_session, "anything", "")

    def test_custom_verifier_order(self, db_session):
        calls = []

        def unavailable(db, password, stored_hash):
            calls.append("unavailable")
            return VerificationOutcome.UNAVAILABLE

        def rejecting(db, password, stored_hash):
            calls.append("rejecting")
            return VerificationOutcome.REJECTED

        def accepting(db, password, stored_hash):
            calls.append("accepting")
            return VerificationOutcome.VERIFIED

        assert not auth_service.check_password(
            db_session, "pw", "hash", verifiers=(unavailable, rejecting, accepting)
        )
        assert calls == ["unavailable", "rejecting"]

    def test_all_unavailable_rejects(self, db_session):
        def unavailable(db, password, stored_hash):
            return VerificationOutcome.UNAVAILABLE

        assert not auth_service.check_password(
            db_session, "pw", "hash", verifiers=(unavailable,)
        )


class TestValidateUser:
    """Tests for looking up users by identifier."""

    def test_by_username_and_email(self, db_session, user_factory):
        seed_rbac_data(db_session)
        user = user_factory("jdoe", role_names=("Viewer",))

        by_name = auth_service.validate_user(db_session, "jdoe")
        by_email = auth_service.validate_user(db_session, "jdoe@example.com")

        assert by_name.user.id == user.id
        assert by_email.user.id == user.id
        assert [r.name for r in by_name.roles] == ["Viewer"]

    def test_includes_companies(self, db_session, user_factory, company):
        user = user_factory("jdoe")
        db_session.add(UserCompany(user_id=user.id, company_id=company.id))
        db_session.commit()

        result = auth_service.validate_user(db_session, "jdoe")

        assert [c.business_name for c in result.companies] == ["Acme Corp"]
        assert [c.id for c in auth_service.get_user_companies(db_session, user.id)] == [
            company.id
        ]

    def test_inactive_user_not_found(self, db_session, user_factory):
        user_factory("jdoe", is_active=False)
        assert auth_service.validate_user(db_session, "jdoe") is None

    def test_unknown_identifier(self, db_session):
        assert auth_service.validate_user(db_session, "nobody") is None


class TestVerifyPassword:
    """Tests for verify_password and the returned profile."""

    def test_success_returns_profile(self, db_session, user_factory):
        seed_rbac_data(db_session)
        company = Company(business_name="Beta", is_active=True)
        db_session.add(company)
        db_session.commit()
        user = user_factory(
            "jdoe", password="Secret123!", role_names=("Viewer", "Operator")
        )
        db_session.add(UserCompany(user_id=user.id, company_id=company.id))
        db_session.commit()

        result = auth_service.verify_password(db_session, user.id, "Secret123!")

        assert result.success is True
        assert result.profile.username == "jdoe"
        assert result.profile.role == "Operator"
        assert [r["name"] for r in result.profile.roles] == ["Operator", "Viewer"]
        assert result.profile.companies == [
            {"id": company.id, "business_name": "Beta"}
        ]

    def test_user_without_roles_has_no_role(self, db_session, user_factory):
        user = user_factory("jdoe", password="Secret123!")

        result = auth_service.verify_password(db_session, user.id, "Secret123!")

        assert result.success is True
        assert result.profile.role is None

    def test_wrong_password(self, db_session, user_factory):
        user = user_factory("jdoe", password="Secret123!")

        result = auth_service.verify_password(db_session, user.id, "nope")

        assert result.success is False
        assert result.profile is None

    def test_unknown_user(self, db_session):
        assert auth_service.verify_password(db_session, uuid.uuid4(), "x").success is False


class TestSessions:
    """Tests for login sessions."""

    def test_authenticate_by_email(self, db_session, user_factory):
        user = user_factory("jdoe", password="Secret123!")
        authenticated = auth_service.authenticate(
            db_session, "jdoe@example.com", "Secret123!"
        )
        assert authenticated.id == user.id
        assert auth_service.authenticate(db_session, "jdoe", "bad") is None

    def test_create_and_get_session(self, db_session, user_factory):
        user = user_factory("jdoe")
        token = auth_service.create_session(db_session, user.id)

        session = auth_service.get_session(db_session, token)

        assert session is not None
        assert session.user_id == user.id

    def test_expired_session_removed(self, db_session, user_factory):
        user = user_factory("jdoe")
        db_session.add(
            SessionModel(
                user_id=user.id,
                token="expired",
                expires_at=datetime.utcnow() - timedelta(minutes=1),
            )
        )
        db_session.commit()

        assert auth_service.get_session(db_session, "expired") is None
        assert db_session.query(SessionModel).count() == 0

    def test_delete_session(self, db_session, user_factory):
        user = user_factory("jdoe")
        token = auth_service.create_session(db_session, user.id)

        assert auth_service.delete_session(db_session, token) is True
        assert auth_service.delete_session(db_session, token) is False

    def test_cleanup_expired_sessions(self, db_session, user_factory):
        user = user_factory("jdoe")
        auth_service.create_session(db_session, user.id)
        db_session.add(
            SessionModel(
                user_id=user.id,
                token="old",
                expires_at=datetime.utcnow() - timedelta(days=1),
            )
        )
        db_session.commit()

        assert auth_service.cleanup_expired_sessions(db_session) == 1
        assert db_session.query(SessionModel).count() == 1


class TestRecovery:
    """Tests for the email code password recovery."""

    def test_generated_code_is_six_digits(self, db_session, received_events):
        code = issue_code(db_session, "jdoe@example.com", received_events)

        assert len(code) == 6
        assert code.isdigit()
        stored = db_session.query(VerificationCode).one()
        assert stored.used is False
        assert stored.purpose.value == "recovery"

    def test_code_expires_after_ttl(self, db_session, received_events):
        before = datetime.utcnow()
        issue_code(db_session, "jdoe@example.com", received_events)

        stored = db_session.query(VerificationCode).one()
        ttl = timedelta(minutes=settings.verification_code_ttl_minutes)
        assert before + ttl <= stored.expires_at <= datetime.utcnow() + ttl

    def test_verify_valid_code(self, db_session, received_events):
        code = issue_code(db_session, "jdoe@example.com", received_events)

        assert auth_service.verify_code(db_session, "jdoe@example.com", code).success

    def test_verify_wrong_code_or_email(self, db_session, received_events):
        code = issue_code(db_session, "jdoe@example.com", received_events)
        wrong = "000000" if code != "000000" else "111111"

        assert not auth_service.verify_code(db_session, "jdoe@example.com", wrong).success
        assert not auth_service.verify_code(db_session, "other@example.com", code).success

    def test_expired_code_rejected(self, db_session, received_events):
        code = issue_code(db_session, "jdoe@example.com", received_events)
        stored = db_session.query(VerificationCode).one()
        stored.expires_at = datetime.utcnow() - timedelta(seconds=1)
        db_session.commit()

        result = auth_service.verify_code(db_session, "jdoe@example.com", code)

        assert result.success is False
        assert result.message == "Invalid or expired code"

    def test_change_password_burns_code(self, db_session, user_factory, received_events):
        user = user_factory("jdoe", password="OldPass1!")
        code = issue_code(db_session, "jdoe@example.com", received_events)

        result = auth_service.change_password(
            db_session, "jdoe@example.com", code, "NewPass1!"
        )

        assert result.success is True
        db_session.refresh(user)
        assert verify_local_hash("NewPass1!", user.hashed_password)
        assert db_session.query(VerificationCode).one().used is True
        assert not auth_service.verify_code(db_session, "jdoe@example.com", code).success
        assert received_events[-1].event_type == AppEvent.PASSWORD_RESET

    def test_code_cannot_be_reused(self, db_session, user_factory, received_events):
        user_factory("jdoe", password="OldPass1!")
        code = issue_code(db_session, "jdoe@example.com", received_events)
        auth_service.change_password(db_session, "jdoe@example.com", code, "NewPass1!")

        again = auth_service.change_password(
            db_session, "jdoe@example.com", code, "Another1!"
        )

        assert again.success is False

    def test_change_password_without_user(self, db_session, received_events):
        code = issue_code(db_session, "ghost@example.com", received_events)

        result = auth_service.change_password(
            db_session, "ghost@example.com", code, "NewPass1!"
        )

        assert result.success is False
        assert db_session.query(VerificationCode).one().used is False
