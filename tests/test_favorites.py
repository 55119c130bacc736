"""Tests for favorites persistence, live snapshots and toggle semantics."""
import asyncio

import pytest

from fxconvert.core.errors import NotAuthenticated
from fxconvert.db.dal import Database
from fxconvert.db.migrate import apply_migrations
from fxconvert.services.favorites import (
    FavoritesService,
    InMemoryFavoritesStore,
    SQLiteFavoritesStore,
)


@pytest.fixture
def sqlite_store(tmp_path):
    path = tmp_path / "fav.sqlite3"
    apply_migrations(path)
    return SQLiteFavoritesStore(Database(path))


def test_add_list_remove(sqlite_store):
    async def run():
        svc = FavoritesService(sqlite_store, "user-a")
        fav_id = await svc.add("usd", "eur")
        listed = await svc.list()
        assert [(f.from_currency, f.to_currency) for f in listed] == [("USD", "EUR")]
        assert svc.projection() == {"USD/EUR": fav_id}
        assert svc.has("USD", "EUR")
        await svc.remove(fav_id)
        assert await svc.list() == []
        assert svc.projection() == {}

    asyncio.run(run())


def test_favorites_are_scoped_per_user(sqlite_store):
    async def run():
        alice = FavoritesService(sqlite_store, "alice")
        bob = FavoritesService(sqlite_store, "bob")
        fav_id = await alice.add("GBP", "NGN")
        assert await bob.list() == []
        await bob.remove(fav_id)
        assert len(await alice.list()) == 1

    asyncio.run(run())


def test_subscription_emits_full_set_on_every_change():
    async def run():
        svc = FavoritesService(InMemoryFavoritesStore(), "user-a")
        sub = await svc.subscribe()
        first = await sub.__anext__()
        assert first == []
        fav_id = await svc.add("USD", "NGN")
        await svc.add("EUR", "GBP")
        second = await sub.__anext__()
        third = await sub.__anext__()
        assert [f.pair for f in second] == ["USD/NGN"]
        assert sorted(f.pair for f in third) == ["EUR/GBP", "USD/NGN"]
        await svc.remove(fav_id)
        fourth = await sub.__anext__()
        assert [f.pair for f in fourth] == ["EUR/GBP"]
        sub.close()
        remaining = [snapshot async for snapshot in sub]
        assert remaining == []

    asyncio.run(run())


def test_closed_subscription_gets_no_more_snapshots():
    async def run():
        svc = FavoritesService(InMemoryFavoritesStore(), "user-a")
        async with await svc.subscribe() as sub:
            await sub.__anext__()
        await svc.add("USD", "EUR")
        assert sub.closed
        assert [s async for s in sub] == []

    asyncio.run(run())


def test_anonymous_session_cannot_touch_favorites():
    svc = FavoritesService(InMemoryFavoritesStore(), None)
    with pytest.raises(NotAuthenticated):
        asyncio.run(svc.add("USD", "EUR"))
    with pytest.raises(NotAuthenticated):
        asyncio.run(svc.subscribe())
