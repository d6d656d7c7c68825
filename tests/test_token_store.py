"""
Tests for the persisted TokenStore.
"""

import pytest

from storefront.datastore.engine import close_db, init_db
from storefront.services.token_store import TokenStore


class TestTokenStore:
    @pytest.mark.asyncio
    async def test_empty_store(self, token_store):
        assert await token_store.get_access_token() is None
        assert await token_store.get_refresh_token() is None
        assert await token_store.get_user() is None
        assert await token_store.get_credentials() is None

    @pytest.mark.asyncio
    async def test_set_credentials(self, token_store):
        await token_store.set_credentials("access-1", "refresh-1")

        assert await token_store.get_access_token() == "access-1"
        assert await token_store.get_refresh_token() == "refresh-1"

    @pytest.mark.asyncio
    async def test_set_credentials_without_refresh_keeps_old_refresh(self, token_store):
        await token_store.set_credentials("access-1", "refresh-1")
        await token_store.set_credentials("access-2")

        credentials = await token_store.get_credentials()

        assert credentials.access_token == "access-2"
        assert credentials.refresh_token == "refresh-1"

    @pytest.mark.asyncio
    async def test_save_session_and_user_profile(self, token_store):
        user = {"id": 7, "name": "Lan", "role": "admin"}

        await token_store.save_session(user, "access-1", "refresh-1")

        assert await token_store.get_user() == user
        assert await token_store.get_access_token() == "access-1"
        assert await token_store.get_refresh_token() == "refresh-1"

    @pytest.mark.asyncio
    async def test_clear_wipes_all_three_keys(self, token_store):
        await token_store.save_session({"id": 1}, "access-1", "refresh-1")

        await token_store.clear()

        assert await token_store.get_user() is None
        assert await token_store.get_access_token() is None
        assert await token_store.get_refresh_token() is None

    @pytest.mark.asyncio
    async def test_clear_on_empty_store_is_noop(self, token_store):
        await token_store.clear()
        assert await token_store.get_credentials() is None

    @pytest.mark.asyncio
    async def test_credentials_survive_restart(self, database_url):
        engine, session_factory = await init_db(database_url, echo=False)
        await TokenStore(session_factory).save_session(
            {"id": 3}, "access-1", "refresh-1"
        )
        await close_db(engine)

        engine, session_factory = await init_db(database_url, echo=False)
        try:
            store = TokenStore(session_factory)
            assert await store.get_access_token() == "access-1"
            assert await store.get_user() == {"id": 3}
        finally:
            await close_db(engine)
