"""
Tests for registration, login and credential handling at the service level.
"""

from datetime import date, timedelta

import pytest

from chainvote.core.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from chainvote.core.security import create_access_token, decode_access_token, verify_password
from chainvote.models.user import Voter
from chainvote.schemas.user import PrincipalContext
from chainvote.services import identity

from conftest import ISSUE_DATE, STRONG_PASSWORD, register_test_voter


class TestPasswordPolicy:
    """Password strength rules shared by registration and password change"""

    @pytest.mark.parametrize("password", ["Passw0rd!", "Abcdef1#", "Zz9@zzzzzz"])
    def test_accepts_strong_passwords(self, password):
        identity.validate_password_policy(password)

    @pytest.mark.parametrize("password", [
        "Sh0rt!",          # too short
        "password1!",      # no uppercase
        "PASSWORD1!",      # no lowercase
        "Password!!",      # no digit
        "Password11",      # no special character
        "Passw0rd!^",      # character outside the allowed set
    ])
    def test_rejects_weak_passwords(self, password):
        with pytest.raises(ValidationError):
            identity.validate_password_policy(password)


class TestRegistration:

    def test_register_admin_returns_credential(self, db_session):
        admin, token = identity.register_admin(
            db_session, "alice", "alice@example.com", STRONG_PASSWORD, "AliceWa11et"
        )

        assert admin.id is not None
        assert admin.hashed_password != STRONG_PASSWORD
        assert verify_password(STRONG_PASSWORD, admin.hashed_password)

        claims = decode_access_token(token)
        assert claims["role"] == "admin"
        assert claims["id"] == admin.id
        assert claims["sub"] == "alice@example.com"

    def test_register_voter_generates_voter_id(self, db_session):
        voter, token = register_test_voter(db_session, 7)

        assert voter.voter_id.startswith("VID-")
        date_part, suffix = voter.voter_id.split("-")[1:]
        assert len(date_part) == 8 and date_part.isdigit()
        assert len(suffix) == 5 and suffix.isalnum() and suffix.upper() == suffix
        assert voter.is_eligible is True
        assert decode_access_token(token)["voter_id"] == voter.voter_id

    def test_national_id_never_stored_in_plaintext(self, db_session):
        voter, _ = register_test_voter(db_session, 3)

        assert voter.national_id_hash != "1000000003"
        assert voter.national_id_digest != "1000000003"
        assert "1000000003" not in (voter.national_id_hash + voter.national_id_digest)

    def test_weak_password_rejected(self, db_session):
        with pytest.raises(ValidationError):
            identity.register_admin(db_session, "bob", "bob@example.com", "weak", "BobWa11et")

    def test_missing_wallet_rejected(self, db_session):
        with pytest.raises(ValidationError):
            identity.register_admin(db_session, "bob", "bob@example.com", STRONG_PASSWORD, "   ")

    @pytest.mark.parametrize("national_id", ["1234", "12345678901234567890123", "12ab5678"])
    def test_malformed_national_id_rejected(self, db_session, national_id):
        with pytest.raises(ValidationError):
            identity.register_voter(
                db_session, "carol", "carol@example.com", STRONG_PASSWORD, "CarolWa11et", national_id, ISSUE_DATE
            )

    def test_email_unique_across_admins_and_voters(self, db_session, admin):
        with pytest.raises(ConflictError):
            identity.register_voter(
                db_session, "dup", admin.email, STRONG_PASSWORD, "FreshWa11et", "5555555555", ISSUE_DATE
            )

    def test_wallet_unique_across_admins_and_voters(self, db_session, voter):
        with pytest.raises(ConflictError):
            identity.register_admin(db_session, "dup", "fresh@example.com", STRONG_PASSWORD, voter.wallet_address)

    def test_duplicate_national_id_rejected(self, db_session, voter):
        with pytest.raises(ConflictError):
            identity.register_voter(
                db_session, "twin", "twin@example.com", STRONG_PASSWORD, "TwinWa11et", "1000000001", ISSUE_DATE
            )
        assert db_session.query(Voter).count() == 1


class TestLogin:

    def test_admin_login(self, db_session, admin):
        logged_in, token = identity.login_admin(db_session, admin.email, STRONG_PASSWORD)
        assert logged_in.id == admin.id
        assert decode_access_token(token)["role"] == "admin"

    def test_admin_login_wrong_password(self, db_session, admin):
        with pytest.raises(AuthenticationError) as exc_info:
            identity.login_admin(db_session, admin.email, "Wr0ngPass!")
        assert exc_info.value.message == "Invalid credentials"

    def test_admin_login_unknown_email_same_error(self, db_session, admin):
        with pytest.raises(AuthenticationError) as exc_info:
            identity.login_admin(db_session, "nobody@example.com", STRONG_PASSWORD)
        assert exc_info.value.message == "Invalid credentials"

    def test_voter_login(self, db_session, voter):
        logged_in, token = identity.login_voter(db_session, voter.voter_id, "1000000001", ISSUE_DATE)
        assert logged_in.id == voter.id
        assert decode_access_token(token)["voter_id"] == voter.voter_id

    @pytest.mark.parametrize("voter_id, national_id, issue_date", [
        ("VID-19990101-XXXXX", "1000000001", ISSUE_DATE),
        (None, "9999999999", ISSUE_DATE),
        (None, "1000000001", ISSUE_DATE + timedelta(days=1)),
    ])
    def test_voter_login_failures_are_indistinguishable(self, db_session, voter, voter_id, national_id, issue_date):
        with pytest.raises(AuthenticationError) as exc_info:
            identity.login_voter(db_session, voter_id or voter.voter_id, national_id, issue_date)
        assert exc_info.value.message == "Invalid credentials"
        assert exc_info.value.status_code == 401


class TestAuthenticate:

    def test_missing_credential(self):
        with pytest.raises(AuthenticationError) as exc_info:
            identity.authenticate(None)
        assert exc_info.value.error_code == "AUTH_ERROR"

    def test_garbage_credential(self):
        with pytest.raises(AuthenticationError):
            identity.authenticate("not-a-jwt")

    def test_expired_credential(self):
        token = create_access_token({"sub": "a@example.com", "id": 1, "role": "admin"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(AuthenticationError):
            identity.authenticate(token)

    def test_credential_without_role_rejected(self):
        token = create_access_token({"sub": "a@example.com", "id": 1})
        with pytest.raises(AuthenticationError):
            identity.authenticate(token)

    def test_valid_credential_yields_principal(self, voter_account):
        voter, token = voter_account
        principal = identity.authenticate(token)

        assert principal == PrincipalContext(id=voter.id, email=voter.email, role="voter", voter_id=voter.voter_id)
        assert principal.is_voter and not principal.is_admin


class TestProfile:

    def test_update_username_and_wallet(self, db_session, voter_ctx):
        updated = identity.update_profile(db_session, voter_ctx, username="renamed", wallet_address="NewWa11et")
        assert updated.username == "renamed"
        assert updated.wallet_address == "NewWa11et"

    def test_update_wallet_to_taken_value(self, db_session, voter_ctx, admin):
        with pytest.raises(ConflictError):
            identity.update_profile(db_session, voter_ctx, wallet_address=admin.wallet_address)

    def test_keeping_own_wallet_is_not_a_conflict(self, db_session, voter_ctx, voter):
        updated = identity.update_profile(db_session, voter_ctx, wallet_address=voter.wallet_address)
        assert updated.wallet_address == voter.wallet_address

    def test_change_password(self, db_session, admin_ctx, admin):
        identity.change_password(db_session, admin_ctx, STRONG_PASSWORD, "N3wPassword#")
        db_session.refresh(admin)
        assert verify_password("N3wPassword#", admin.hashed_password)

    def test_change_password_requires_current(self, db_session, admin_ctx):
        with pytest.raises(AuthenticationError):
            identity.change_password(db_session, admin_ctx, "Wr0ngPass!", "N3wPassword#")

    def test_change_password_enforces_policy(self, db_session, admin_ctx):
        with pytest.raises(ValidationError):
            identity.change_password(db_session, admin_ctx, STRONG_PASSWORD, "weak")

    def test_profile_of_missing_principal(self, db_session):
        with pytest.raises(NotFoundError):
            identity.get_profile(db_session, PrincipalContext(id=999, role="admin"))


def test_generate_voter_id_uses_given_date():
    voter_id = identity.generate_voter_id(date(2024, 2, 29))
    assert voter_id.startswith("VID-20240229-")
