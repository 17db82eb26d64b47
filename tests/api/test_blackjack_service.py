"""
Tests for BlackjackService, the remote game boundary.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from multijack.api.blackjack import BlackjackService
from multijack.api.views import GameView, HandView
from multijack.blackjack.constants import DEALER_NAME
from multijack.blackjack.errors import (
    DeckUnavailable,
    DuplicateGame,
    InvalidPlayers,
    NotFound,
    OutOfTurn,
)
from multijack.blackjack.game import GameStatus
from multijack.blackjack.store import InMemoryGameStore
from multijack.events import EngineEventType, EventBus

# Dealer 10+5=15, Alice 2+9=11, Bob 3+6=9
OPENING = [10, 2, 3, 5, 9, 6]


@pytest.fixture
def store():
    return InMemoryGameStore()


@pytest.fixture
def deck(scripted_deck):
    return scripted_deck(OPENING)


@pytest.fixture
def service(store, deck):
    return BlackjackService(store, deck)


@pytest.mark.asyncio
async def test_new_game_view_is_anonymous(service, store):
    view = await service.new_game(["Alice", "Bob"])

    assert view.status == GameStatus.AWAITING_PLAYER
    assert view.next_player == DEALER_NAME
    assert view.winner == ""
    assert view.viewer == ""
    assert len(view.hands[DEALER_NAME].cards) == 1
    assert view.hands[DEALER_NAME].score == 0
    assert view.hands["Alice"] == HandView()
    assert view.hands["Bob"] == HandView()
    assert view.game_id in store


@pytest.mark.asyncio
async def test_new_game_emits_created(service):
    created = MagicMock()
    EventBus.get_instance().on(EngineEventType.GAME_CREATED, created)
    view = await service.new_game(["Alice"])
    created.assert_called_once_with(
        {"game_id": view.game_id, "players": [DEALER_NAME, "Alice"]}
    )


@pytest.mark.asyncio
async def test_new_game_without_players(service, deck, store):
    with pytest.raises(InvalidPlayers):
        await service.new_game([])
    assert deck.created == 0
    assert len(store) == 0


@pytest.mark.asyncio
async def test_new_game_deck_creation_fails(service, deck, store):
    deck.fail_create = True
    with pytest.raises(DeckUnavailable):
        await service.new_game(["Alice"])
    assert len(store) == 0


@pytest.mark.asyncio
async def test_new_game_unexpected_deck_error(service, deck, store):
    deck.fail_create = True
    deck.error = RuntimeError("deck backend returned 503")
    with pytest.raises(DeckUnavailable) as excinfo:
        await service.new_game(["Alice"])
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert len(store) == 0


@pytest.mark.asyncio
async def test_new_game_rejects_bare_string(service, deck, store):
    with pytest.raises(InvalidPlayers):
        await service.new_game("Alice")
    assert deck.created == 0
    assert len(store) == 0


@pytest.mark.asyncio
async def test_new_game_deal_fails(store, scripted_deck):
    deck = scripted_deck([10, 2, 3])
    service = BlackjackService(store, deck)
    with pytest.raises(DeckUnavailable):
        await service.new_game(["Alice", "Bob"])
    assert len(store) == 0
    assert deck.discarded == ["deck-1"]


@pytest.mark.asyncio
async def test_new_game_deck_times_out(store, deck):
    deck.delay = 0.5
    service = BlackjackService(store, deck, config={"deck": {"timeout": 0.01}})
    with pytest.raises(DeckUnavailable):
        await service.new_game(["Alice"])
    assert len(store) == 0


@pytest.mark.asyncio
async def test_player_sees_own_hand_only(service):
    game_id = (await service.new_game(["Alice", "Bob"])).game_id
    view = await service.get_game(game_id, "Alice")

    assert view.viewer == "Alice"
    assert len(view.hands["Alice"].cards) == 2
    assert view.hands["Alice"].score == 11
    assert [c.face_value for c in view.hands[DEALER_NAME].cards] == [10]
    assert view.hands[DEALER_NAME].score == 0
    assert view.hands["Bob"].cards == ()
    assert view.hands["Bob"].score == 0


@pytest.mark.asyncio
async def test_dealer_sees_own_hand(service):
    game_id = (await service.new_game(["Alice", "Bob"])).game_id
    view = await service.get_game(game_id, DEALER_NAME)
    assert len(view.hands[DEALER_NAME].cards) == 2
    assert view.hands[DEALER_NAME].score == 15
    assert view.hands["Alice"].cards == ()
    assert view.hands["Bob"].cards == ()


@pytest.mark.asyncio
async def test_get_unknown_game(service):
    with pytest.raises(NotFound):
        await service.get_game("nope", "Alice")


@pytest.mark.asyncio
async def test_play_turn_returns_actor_view(service, deck):
    game_id = (await service.new_game(["Alice", "Bob"])).game_id
    deck.extend(4)
    view = await service.play_turn(game_id, DEALER_NAME, "hit")
    assert view.viewer == DEALER_NAME
    assert view.hands[DEALER_NAME].score == 19
    assert view.next_player == "Alice"
    assert deck.discarded == []


@pytest.mark.asyncio
async def test_rejected_turn_is_not_stored(service):
    game_id = (await service.new_game(["Alice", "Bob"])).game_id
    before = (await service.get_game(game_id, "Alice")).to_json()
    with pytest.raises(OutOfTurn):
        await service.play_turn(game_id, "Alice", "hit")
    assert (await service.get_game(game_id, "Alice")).to_json() == before


@pytest.mark.asyncio
async def test_play_turn_unknown_game(service):
    with pytest.raises(NotFound):
        await service.play_turn("nope", DEALER_NAME, "stand")


@pytest.mark.asyncio
async def test_finished_game_views_are_stable(service, deck):
    game_id = (await service.new_game(["Alice", "Bob"])).game_id
    deck.extend(10, 5, 10, 10)
    await service.play_turn(game_id, DEALER_NAME, "hit")
    await service.play_turn(game_id, "Alice", "hit")
    await service.play_turn(game_id, "Bob", "hit")
    final = await service.play_turn(game_id, "Alice", "hit")
    assert final.status == GameStatus.FINISHED
    assert final.winner == "Bob"
    assert deck.discarded == ["deck-1"]

    first = await service.get_game(game_id, "Bob")
    second = await service.get_game(game_id, "Bob")
    assert first == second
    assert first.to_json() == second.to_json()
    assert first.hands["Alice"].bust
    assert first.hands["Bob"].score == 19


@pytest.mark.asyncio
async def test_view_dict_form(service):
    game_id = (await service.new_game(["Alice", "Bob"])).game_id
    view = await service.get_game(game_id, "Alice")
    data = view.to_dict()
    assert data["status"] == "awaiting_player"
    assert data["hands"]["Alice"]["score"] == 11
    assert GameView.from_dict(data) == view
    assert view.hand("Zed") is None


@pytest.mark.asyncio
async def test_dealer_registered_on_new_game(store, deck):
    registrar = MagicMock()
    registrar.register_auto_player = AsyncMock(return_value=True)
    service = BlackjackService(store, deck, registrar=registrar)

    view = await service.new_game(["Alice"])
    registrar.register_auto_player.assert_awaited_once_with(
        view.game_id, DEALER_NAME, "dealer"
    )


@pytest.mark.asyncio
async def test_dealer_registration_can_be_disabled(store, deck):
    registrar = MagicMock()
    registrar.register_auto_player = AsyncMock(return_value=True)
    service = BlackjackService(
        store, deck, registrar=registrar, config={"game": {"register_dealer": False}}
    )
    await service.new_game(["Alice"])
    registrar.register_auto_player.assert_not_awaited()


@pytest.mark.asyncio
async def test_failed_dealer_registration_keeps_game(store, deck, caplog):
    registrar = MagicMock()
    registrar.register_auto_player = AsyncMock(side_effect=DuplicateGame("x"))
    service = BlackjackService(store, deck, registrar=registrar)

    view = await service.new_game(["Alice"])
    assert view.game_id in store
    assert "Could not register dealer" in caplog.text


def test_service_requires_collaborators(store, deck):
    with pytest.raises(ValueError):
        BlackjackService(None, deck)
    with pytest.raises(ValueError):
        BlackjackService(store, None)
