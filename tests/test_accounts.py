"""
Tests for account identity, indices and account-wide mutations.
"""
import asyncio

import pytest

from authdb.core.errors import Duplicate, IncorrectPassword, NotFound
from authdb.schemas.account import AccountRecord
from tests.factories import account_data, new_id, reset_data


class TestCreateAccount:
    """Tests for create_account and the lookup indices."""

    @pytest.mark.asyncio
    async def test_create_and_read_back(self, store, uid):
        """The read record matches what was stored, minus the verify hash."""
        data = account_data("Foo@Example.com", open_id="https://openid.example/foo")
        await store.create_account(uid, data)

        record = await store.account(uid)
        assert isinstance(record, AccountRecord)
        assert record.uid == uid
        assert record.email == "Foo@Example.com"
        assert record.normalized_email == "foo@example.com"
        assert record.auth_salt == data["auth_salt"]
        assert record.wrap_wrap_kb == data["wrap_wrap_kb"]
        assert record.locked_at is None
        assert "verify_hash" not in record.model_dump()

    @pytest.mark.asyncio
    async def test_indices_resolve_to_same_account(self, store, uid):
        """Email and openId lookups return the account created under uid."""
        await store.create_account(uid, account_data("Foo@Example.com", open_id="oid-1"))

        by_uid = await store.account(uid)
        by_email = await store.email_record("FOO@example.COM")
        by_open_id = await store.open_id_record(b"oid-1")
        assert by_email == by_uid
        assert by_open_id == by_uid

    @pytest.mark.asyncio
    async def test_hex_and_bytes_identifiers_are_interchangeable(self, store, uid):
        """A uid given as bytes can be read back with its hex form."""
        await store.create_account(uid, account_data())
        record = await store.account(uid.hex().upper())
        assert record.uid == uid

    @pytest.mark.asyncio
    async def test_duplicate_uid(self, store, uid):
        await store.create_account(uid, account_data("a@example.com"))
        with pytest.raises(Duplicate):
            await store.create_account(uid, account_data("b@example.com"))

    @pytest.mark.asyncio
    async def test_duplicate_email_ignores_case(self, store):
        """Two accounts whose emails differ only in case conflict."""
        await store.create_account(new_id(), account_data("foo@example.com"))
        with pytest.raises(Duplicate):
            await store.create_account(new_id(), account_data("FOO@Example.com"))

    @pytest.mark.asyncio
    async def test_duplicate_open_id(self, store):
        await store.create_account(new_id(), account_data("a@example.com", open_id="oid"))
        with pytest.raises(Duplicate):
            await store.create_account(new_id(), account_data("b@example.com", open_id="oid"))

    @pytest.mark.asyncio
    async def test_failed_create_leaves_no_index_entries(self, store, uid):
        """A rejected create does not index its email."""
        await store.create_account(new_id(), account_data("a@example.com", open_id="oid"))
        with pytest.raises(Duplicate):
            await store.create_account(uid, account_data("b@example.com", open_id="oid"))

        with pytest.raises(NotFound):
            await store.account_exists("b@example.com")
        with pytest.raises(NotFound):
            await store.account(uid)

    @pytest.mark.asyncio
    async def test_concurrent_creates_with_same_email(self, store):
        """Only one of many concurrent creates for one email succeeds."""
        results = await asyncio.gather(
            *[store.create_account(new_id(), account_data("race@example.com")) for _ in range(10)],
            return_exceptions=True,
        )
        assert sum(1 for r in results if r is None) == 1
        assert all(isinstance(r, Duplicate) for r in results if r is not None)


class TestLookups:
    """Tests for account lookups that should fail."""

    @pytest.mark.asyncio
    async def test_missing_account(self, store, uid):
        with pytest.raises(NotFound):
            await store.account(uid)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("blank", [None, b"", ""])
    async def test_blank_uid(self, store, blank):
        with pytest.raises(NotFound):
            await store.account(blank)

    @pytest.mark.asyncio
    async def test_unknown_email(self, store):
        with pytest.raises(NotFound):
            await store.email_record("nobody@example.com")

    @pytest.mark.asyncio
    async def test_unknown_open_id(self, store):
        with pytest.raises(NotFound):
            await store.open_id_record("missing")

    @pytest.mark.asyncio
    async def test_account_exists(self, store, make_account):
        await make_account("Foo@Example.com")
        assert await store.account_exists(b"foo@EXAMPLE.com") is None


class TestCheckPassword:
    """Tests for check_password."""

    @pytest.mark.asyncio
    async def test_correct_hash(self, store, uid):
        data = account_data()
        await store.create_account(uid, data)
        assert await store.check_password(uid, data["verify_hash"]) == uid

    @pytest.mark.asyncio
    async def test_correct_hash_as_hex(self, store, uid):
        data = account_data()
        await store.create_account(uid, data)
        assert await store.check_password(uid, data["verify_hash"].hex()) == uid

    @pytest.mark.asyncio
    async def test_hash_stored_as_hex_text(self, store, uid):
        """A hash given as hex text is stored as the bytes it encodes."""
        verify_hash = "ab" * 32
        await store.create_account(uid, account_data(verify_hash=verify_hash))

        assert await store.check_password(uid, verify_hash) == uid
        assert await store.check_password(uid, bytes.fromhex(verify_hash)) == uid

    @pytest.mark.asyncio
    async def test_reset_hash_as_hex_text(self, store, make_account):
        uid = await make_account()
        verify_hash = "cd" * 32
        await store.reset_account(uid, reset_data(verify_hash=verify_hash))

        assert await store.check_password(uid, verify_hash.upper()) == uid

    @pytest.mark.asyncio
    async def test_non_hex_hash_text_is_rejected(self, store, uid):
        with pytest.raises(ValueError):
            await store.create_account(uid, account_data(verify_hash="not-hex"))

    @pytest.mark.asyncio
    async def test_wrong_hash(self, store, uid):
        await store.create_account(uid, account_data())
        with pytest.raises(IncorrectPassword):
            await store.check_password(uid, b"\x00" * 32)

    @pytest.mark.asyncio
    async def test_missing_account_is_incorrect_password(self, store):
        """An unknown account is reported exactly like a wrong hash."""
        with pytest.raises(IncorrectPassword):
            await store.check_password(new_id(), b"\x00" * 32)


class TestAccountMutations:
    """Tests for verify_email, update_locale and reset_account."""

    @pytest.mark.asyncio
    async def test_verify_email(self, store, make_account):
        uid = await make_account()
        await store.verify_email(uid)
        assert (await store.account(uid)).email_verified is True

    @pytest.mark.asyncio
    async def test_verify_email_missing_account_is_noop(self, store):
        assert await store.verify_email(new_id()) is None

    @pytest.mark.asyncio
    async def test_update_locale(self, store, make_account):
        uid = await make_account()
        await store.update_locale(uid, "fr-FR")
        assert (await store.account(uid)).locale == "fr-FR"

    @pytest.mark.asyncio
    async def test_update_locale_missing_account(self, store):
        with pytest.raises(NotFound):
            await store.update_locale(new_id(), "fr-FR")

    @pytest.mark.asyncio
    async def test_reset_account_replaces_credentials(self, store, uid):
        original = account_data()
        await store.create_account(uid, original)
        new_credentials = reset_data(verifier_version=2)

        await store.reset_account(uid, new_credentials)

        record = await store.account(uid)
        assert record.email == original["email"]
        assert record.auth_salt == new_credentials["auth_salt"]
        assert record.wrap_wrap_kb == new_credentials["wrap_wrap_kb"]
        assert record.verifier_set_at == new_credentials["verifier_set_at"]
        assert record.verifier_version == 2
        assert await store.check_password(uid, new_credentials["verify_hash"]) == uid
        with pytest.raises(IncorrectPassword):
            await store.check_password(uid, original["verify_hash"])

    @pytest.mark.asyncio
    async def test_reset_missing_account(self, store):
        with pytest.raises(NotFound):
            await store.reset_account(new_id(), reset_data())

    @pytest.mark.asyncio
    async def test_delete_account_frees_email_and_open_id(self, store, uid):
        await store.create_account(uid, account_data("foo@example.com", open_id="oid"))
        await store.delete_account(uid)

        with pytest.raises(NotFound):
            await store.account(uid)
        with pytest.raises(NotFound):
            await store.email_record("foo@example.com")
        with pytest.raises(NotFound):
            await store.open_id_record("oid")

        # Both keys can be used again
        await store.create_account(new_id(), account_data("foo@example.com", open_id="oid"))

    @pytest.mark.asyncio
    async def test_delete_missing_account(self, store):
        with pytest.raises(NotFound):
            await store.delete_account(new_id())


class TestStoreLifecycle:
    """Tests for connect, ping and close."""

    @pytest.mark.asyncio
    async def test_connect_ignores_options(self):
        import authdb

        store = await authdb.connect({"ENVIRONMENT": "test", "unknown_option": 1})
        assert store.settings.ENVIRONMENT == "test"
        assert await store.ping() is None
        assert await store.close() is None

    @pytest.mark.asyncio
    async def test_stores_are_independent(self, store, uid):
        """Two stores never share tables."""
        other = await type(store).connect()
        await store.create_account(uid, account_data())
        with pytest.raises(NotFound):
            await other.account(uid)
