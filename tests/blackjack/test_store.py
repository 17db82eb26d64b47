"""
Tests for InMemoryGameStore.
"""

import asyncio

import pytest

from multijack.blackjack.action import Action
from multijack.blackjack.constants import DEALER_NAME
from multijack.blackjack.errors import DeckUnavailable, NotFound, OutOfTurn
from multijack.blackjack.game import Game
from multijack.blackjack.store import InMemoryGameStore

# Dealer 10+5=15, Alice 2+9=11
OPENING = [10, 2, 5, 9]


async def started_game(deck, game_id=None):
    game = Game(["Alice"], "deck-1", deck, game_id=game_id)
    await game.start()
    return game


@pytest.mark.asyncio
async def test_get_missing():
    store = InMemoryGameStore()
    with pytest.raises(NotFound) as excinfo:
        await store.get("nope")
    assert excinfo.value.game_id == "nope"


@pytest.mark.asyncio
async def test_put_then_get(scripted_deck):
    store = InMemoryGameStore()
    game = await started_game(scripted_deck(OPENING))
    await store.put(game.id, game)

    fetched = await store.get(game.id)
    assert fetched is not game
    assert fetched.id == game.id
    assert fetched.next_player == DEALER_NAME
    assert fetched.players["Alice"].score == 11
    assert game.id in store
    assert len(store) == 1


@pytest.mark.asyncio
async def test_fetched_copy_is_private(scripted_deck):
    deck = scripted_deck(OPENING + [2])
    store = InMemoryGameStore()
    game = await started_game(deck)
    await store.put(game.id, game)

    fetched = await store.get(game.id)
    await fetched.play_turn(Action.HIT, DEALER_NAME)

    stored = await store.get(game.id)
    assert stored.next_player == DEALER_NAME
    assert len(stored.players[DEALER_NAME].hand) == 2


@pytest.mark.asyncio
async def test_later_put_is_visible(scripted_deck):
    deck = scripted_deck(OPENING)
    store = InMemoryGameStore()
    game = await started_game(deck)
    await store.put(game.id, game)
    await game.play_turn(Action.STAND, DEALER_NAME)
    await store.put(game.id, game)
    assert (await store.get(game.id)).next_player == "Alice"


@pytest.mark.asyncio
async def test_update_persists(scripted_deck):
    store = InMemoryGameStore()
    game = await started_game(scripted_deck(OPENING))
    await store.put(game.id, game)

    updated = await store.update(
        game.id, lambda g: g.play_turn(Action.STAND, DEALER_NAME)
    )
    assert updated.next_player == "Alice"
    assert (await store.get(game.id)).next_player == "Alice"


@pytest.mark.asyncio
async def test_update_accepts_plain_functions(scripted_deck):
    store = InMemoryGameStore()
    game = await started_game(scripted_deck(OPENING))
    await store.put(game.id, game)

    def rename(g):
        g.winner = "nobody"

    await store.update(game.id, rename)
    assert (await store.get(game.id)).winner == "nobody"


@pytest.mark.asyncio
async def test_failed_update_stores_nothing(scripted_deck):
    deck = scripted_deck(OPENING)
    store = InMemoryGameStore()
    game = await started_game(deck)
    await store.put(game.id, game)

    deck.fail_fetch = True
    with pytest.raises(DeckUnavailable):
        await store.update(game.id, lambda g: g.play_turn(Action.HIT, DEALER_NAME))

    stored = await store.get(game.id)
    assert stored.next_player == DEALER_NAME
    assert len(stored.players[DEALER_NAME].hand) == 2


@pytest.mark.asyncio
async def test_update_missing():
    store = InMemoryGameStore()
    with pytest.raises(NotFound):
        await store.update("nope", lambda g: None)


@pytest.mark.asyncio
async def test_concurrent_updates_are_serialized(scripted_deck):
    deck = scripted_deck(OPENING + [2, 3])
    deck.delay = 0.01
    store = InMemoryGameStore()
    game = await started_game(deck)
    await store.put(game.id, game)

    async def dealer_hits():
        return await store.update(
            game.id, lambda g: g.play_turn(Action.HIT, DEALER_NAME)
        )

    results = await asyncio.gather(dealer_hits(), dealer_hits(), return_exceptions=True)

    assert sum(isinstance(r, Game) for r in results) == 1
    assert sum(isinstance(r, OutOfTurn) for r in results) == 1
    stored = await store.get(game.id)
    assert len(stored.players[DEALER_NAME].hand) == 3
    assert stored.next_player == "Alice"


@pytest.mark.asyncio
async def test_naive_get_put_loses_a_turn(scripted_deck):
    """
    Two fetch-mutate-put sequences on one game race: both turns are
    accepted, both cards are drawn, but only the last put survives.
    """
    deck = scripted_deck(OPENING + [2, 3])
    deck.delay = 0.01
    store = InMemoryGameStore()
    game = await started_game(deck)
    await store.put(game.id, game)

    async def dealer_hits():
        fetched = await store.get(game.id)
        await fetched.play_turn(Action.HIT, DEALER_NAME)
        await store.put(game.id, fetched)

    await asyncio.gather(dealer_hits(), dealer_hits())

    assert deck.fetched == len(OPENING) + 2
    stored = await store.get(game.id)
    assert len(stored.players[DEALER_NAME].hand) == 3


@pytest.mark.asyncio
async def test_update_does_not_block_other_games(scripted_deck):
    store = InMemoryGameStore()
    first = await started_game(scripted_deck(OPENING), game_id="first")
    second = await started_game(scripted_deck(OPENING), game_id="second")
    await store.put(first.id, first)
    await store.put(second.id, second)

    release = asyncio.Event()

    async def hold(g):
        await release.wait()

    holder = asyncio.create_task(store.update("first", hold))
    await asyncio.sleep(0)

    updated = await asyncio.wait_for(
        store.update("second", lambda g: g.play_turn(Action.STAND, DEALER_NAME)),
        timeout=1.0,
    )
    assert updated.next_player == "Alice"
    assert (await asyncio.wait_for(store.get("first"), 1.0)).id == "first"

    release.set()
    await holder


@pytest.mark.asyncio
async def test_delete(scripted_deck):
    store = InMemoryGameStore()
    game = await started_game(scripted_deck(OPENING))
    await store.put(game.id, game)
    await store.delete(game.id)
    await store.delete(game.id)
    assert game.id not in store
    assert store.game_ids() == []
