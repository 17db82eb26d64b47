"""
Command-line table.

Runs one game in-process: humans type their moves, the dealer is played by
the agent through the same service calls a remote client would make.

    multijack --players Alice Bob --interval 1
"""

import argparse
import asyncio
import sys
from typing import Any, Dict, List, Optional

from multijack.agent import Agent, LocalGameClient
from multijack.api import AutoPlayerService, BlackjackService, GameView, HandView
from multijack.blackjack.constants import DEALER_NAME
from multijack.blackjack.errors import BlackjackError, InvalidAction, OutOfTurn
from multijack.blackjack.store import InMemoryGameStore
from multijack.blackjack.strategy import Strategy
from multijack.config import ConfigError, load_config
from multijack.deck.service import InMemoryDeckService
from multijack.events import JsonlEventRecorder
from multijack.log import configure_logging

POLL_SECONDS = 0.25


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multijack", description="Play a game of multiplayer blackjack."
    )
    parser.add_argument(
        "--players", nargs="+", default=["Player"], help="Names of the human players"
    )
    parser.add_argument(
        "--interval", type=float, default=None, help="Seconds between agent ticks"
    )
    parser.add_argument("--seed", type=int, default=None, help="Deck shuffle seed")
    parser.add_argument("--event-log", default=None, help="Append events to this file")
    parser.add_argument("--log-level", default=None, help="Logging level")
    return parser


def config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.interval is not None:
        overrides["agent"] = {"interval": args.interval}
    if args.event_log:
        overrides["events"] = {"log_path": args.event_log}
    if args.log_level:
        overrides["logging"] = {"level": args.log_level}
    return overrides


def format_hand(name: str, hand: HandView) -> str:
    if not hand.cards:
        cards = "(hidden)"
    else:
        cards = ", ".join(str(card) for card in hand.cards)
    line = f"{name}: {cards}"
    if hand.score:
        line += f" = {hand.score}"
    if hand.bust:
        line += " BUST"
    return line


def format_table(view: GameView) -> List[str]:
    return [format_hand(name, hand) for name, hand in view.hands.items()]


async def prompt(message: str) -> str:
    return await asyncio.to_thread(input, message)


async def play_dealer(service: BlackjackService, game_id: str) -> None:
    """Take the dealer's turn here when the agent is not playing it."""
    own = await service.get_game(game_id, DEALER_NAME)
    action = Strategy.DEALER.decide(own.hands[DEALER_NAME])
    view = await service.play_turn(game_id, DEALER_NAME, action)
    hand = format_hand(DEALER_NAME, view.hands[DEALER_NAME])
    print(f"  {DEALER_NAME} {action.value}s: {hand}")


async def play(args: argparse.Namespace) -> int:
    config = load_config(config_overrides(args))
    configure_logging(config["logging"]["level"])

    service = BlackjackService(
        InMemoryGameStore(), InMemoryDeckService(seed=args.seed), config=config
    )
    agent = Agent.from_config(LocalGameClient(service), config)
    service.registrar = AutoPlayerService(agent)

    recorder: Optional[JsonlEventRecorder] = None
    if config["events"]["log_path"]:
        recorder = JsonlEventRecorder(config["events"]["log_path"])
        await recorder.start()

    agent.start()
    try:
        view = await service.new_game(args.players)
        game_id = view.game_id
        print(f"Game {game_id}")
        for line in format_table(view):
            print(f"  {line}")

        while True:
            view = await service.get_game(game_id, "")
            if view.is_finished:
                break
            name = view.next_player
            if name == DEALER_NAME:
                if game_id in agent:
                    await asyncio.sleep(POLL_SECONDS)
                else:
                    await play_dealer(service, game_id)
                continue

            own = await service.get_game(game_id, name)
            print()
            for line in format_table(own):
                print(f"  {line}")
            answer = await prompt(f"{name}, hit or stand? ")
            try:
                view = await service.play_turn(game_id, name, answer)
            except (InvalidAction, OutOfTurn) as exc:
                print(exc)
                continue
            print(f"  {format_hand(name, view.hands[name])}")

        print()
        print(f"{view.winner} wins!")
        return 0
    except BlackjackError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await agent.stop()
        if recorder is not None:
            await recorder.stop()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(play(args))
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    except (KeyboardInterrupt, EOFError):
        return 130


if __name__ == "__main__":
    sys.exit(main())
