"""
Tests for the signup / login / token-gate flows of ``AuthService``.
"""

import threading

import pytest
from unittest.mock import AsyncMock, patch

from auth.exceptions import DuplicateUser, InvalidCredentials, InvalidToken, TokenMissing
from auth.jwt import TokenIssuer
from auth.password import hash_password, verify_password
from auth.service import AuthService, authenticate, extract_token
from errors import DuplicateKey, StoreUnavailable
from tests.fakes import FakeUserStore


@pytest.fixture
def store():
    return FakeUserStore()


@pytest.fixture
def issuer():
    return TokenIssuer("secret")


@pytest.fixture
def service(store, issuer):
    return AuthService(store, issuer, bcrypt_rounds=4)


class TestSignup:
    @pytest.mark.asyncio
    async def test_stores_hash_not_password(self, service, store):
        user = await service.signup("alice", "a@x.com", "p@ss1")
        assert store.users[user.user_id].password_hash != "p@ss1"
        assert verify_password("p@ss1", user.password_hash)

    @pytest.mark.asyncio
    async def test_duplicate_username_rejected_and_record_unchanged(self, service, store):
        user = await service.signup("alice", "a@x.com", "p@ss1")
        original_hash = user.password_hash

        with pytest.raises(DuplicateUser):
            await service.signup("alice", "other@x.com", "different")

        assert len(store.users) == 1
        assert store.users[user.user_id].password_hash == original_hash
        assert store.users[user.user_id].email == "a@x.com"

    @pytest.mark.asyncio
    async def test_duplicate_username_does_not_hash_or_insert(self, service, store):
        await service.signup("alice", "a@x.com", "p@ss1")
        with patch("auth.service.hash_password") as mock_hash:
            with pytest.raises(DuplicateUser):
                await service.signup("alice", "b@x.com", "p@ss1")
        mock_hash.assert_not_called()
        assert store.insert_calls == 1

    @pytest.mark.asyncio
    async def test_duplicate_email_maps_to_duplicate_user(self, service):
        await service.signup("alice", "a@x.com", "p@ss1")
        with pytest.raises(DuplicateUser):
            await service.signup("bob", "a@x.com", "p@ss2")

    @pytest.mark.asyncio
    async def test_race_on_insert_maps_to_duplicate_user(self, issuer):
        store = AsyncMock()
        store.find_by_username.return_value = None
        store.insert.side_effect = DuplicateKey("users_username_key")
        service = AuthService(store, issuer, bcrypt_rounds=4)

        with pytest.raises(DuplicateUser):
            await service.signup("alice", "a@x.com", "p@ss1")

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, issuer):
        store = AsyncMock()
        store.find_by_username.side_effect = StoreUnavailable()
        service = AuthService(store, issuer, bcrypt_rounds=4)

        with pytest.raises(StoreUnavailable):
            await service.signup("alice", "a@x.com", "p@ss1")
        store.insert.assert_not_called()

    @pytest.mark.asyncio
    async def test_hash_failure_persists_nothing(self, service, store):
        with patch("auth.service.hash_password", side_effect=ValueError("too long")):
            with pytest.raises(ValueError):
                await service.signup("alice", "a@x.com", "p@ss1")
        assert store.users == {}


class TestLogin:
    @pytest.mark.asyncio
    async def test_correct_password_yields_token_for_user(self, service, issuer):
        user = await service.signup("alice", "a@x.com", "p@ss1")
        token = await service.login("alice", "p@ss1")
        assert issuer.verify(token).sub == str(user.user_id)

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_user_are_indistinguishable(self, service):
        await service.signup("alice", "a@x.com", "p@ss1")

        with pytest.raises(InvalidCredentials) as wrong_pw:
            await service.login("alice", "wrong")
        with pytest.raises(InvalidCredentials) as no_user:
            await service.login("mallory", "p@ss1")

        assert wrong_pw.value.message == no_user.value.message
        assert wrong_pw.value.status_code == no_user.value.status_code

    @pytest.mark.asyncio
    async def test_username_case_sensitive_by_default(self, service):
        await service.signup("alice", "a@x.com", "p@ss1")
        with pytest.raises(InvalidCredentials):
            await service.login("Alice", "p@ss1")

    @pytest.mark.asyncio
    async def test_case_insensitive_option(self, issuer):
        service = AuthService(FakeUserStore(case_insensitive=True), issuer, bcrypt_rounds=4)
        await service.signup("Alice", "a@x.com", "p@ss1")

        assert await service.login("ALICE", "p@ss1")
        with pytest.raises(DuplicateUser):
            await service.signup("alice", "b@x.com", "p@ss1")


    @pytest.mark.asyncio
    async def test_bcrypt_runs_off_the_event_loop_thread(self, service):
        loop_thread = threading.get_ident()
        threads = []

        def tracking_hash(password, rounds):
            threads.append(threading.get_ident())
            return hash_password(password, rounds=rounds)

        def tracking_verify(password, password_hash):
            threads.append(threading.get_ident())
            return verify_password(password, password_hash)

        with patch("auth.service.hash_password", side_effect=tracking_hash), \
                patch("auth.service.verify_password", side_effect=tracking_verify):
            await service.signup("alice", "a@x.com", "p@ss1")
            assert await service.login("alice", "p@ss1")

        assert len(threads) == 2
        assert loop_thread not in threads


class TestTokenGate:
    @pytest.mark.parametrize(
        "header, expected",
        [
            ("Bearer abc.def", "abc.def"),
            ("bearer abc.def", "abc.def"),
            ("abc.def", "abc.def"),
        ],
    )
    def test_extract_token(self, header, expected):
        assert extract_token(header) == expected

    @pytest.mark.parametrize("header", [None, "", "   ", "Bearer", "Bearer ", "Bearer a b", "Basic abc"])
    def test_missing_or_malformed_header(self, header):
        with pytest.raises(TokenMissing):
            extract_token(header)

    def test_authenticate_returns_claims(self, issuer):
        token = issuer.issue("user-1")
        assert authenticate(f"Bearer {token}", issuer).sub == "user-1"

    def test_authenticate_rejects_bad_token(self, issuer):
        with pytest.raises(InvalidToken):
            authenticate("Bearer not.valid", issuer)
