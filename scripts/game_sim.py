#!/usr/bin/env python3
"""Play many duel games against the house player over a local websocket.

The script starts the duel server in-process and connects scripted players,
each finishing a number of full games before disconnecting. Useful to shake out
the protocol and to see how simple play styles fare against the house.

Example:
    python scripts/game_sim.py --games 50 --style mirror --style random
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import websockets
from websockets.asyncio.client import connect

from core.cards import parse_cards
from core.models import GameConfig
from core.strategy import choose_action
from duel.server import run_server

LOGGER = logging.getLogger("game_sim")

# A style maps a state message to the next action payload.
Style = Callable[[Dict[str, Any], random.Random], Dict[str, Any]]


def _pick(action: str, card: Optional[str] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"type": "action", "v": 1, "action": action}
    if card is not None:
        payload["card"] = card
    return payload


def random_style(state: Dict[str, Any], rng: random.Random) -> Dict[str, Any]:
    """Throw a random number of random cards, submit a random five."""
    phase = state["phase"]
    hand: List[str] = state["hand"]
    if phase == "DISCARDING":
        selected = state["selected_discards"]
        if not selected and rng.random() < 0.3:
            return _pick("play_hand")
        if len(selected) == 2 or (selected and rng.random() < 0.5):
            return _pick("confirm_discard")
        remaining = [card for card in hand if card not in selected]
        return _pick("select_discard", rng.choice(remaining))
    if phase == "SUBMITTING":
        selected = state["selected_submit"]
        if len(selected) == 5:
            return _pick("confirm_submit")
        remaining = [card for card in hand if card not in selected]
        return _pick("select_submit", rng.choice(remaining))
    return _advance(phase)


def mirror_style(state: Dict[str, Any], rng: random.Random) -> Dict[str, Any]:
    """Play exactly like the house: keep the best five, always discard two."""
    phase = state["phase"]
    hand = state["hand"]
    if phase in ("DISCARDING", "SUBMITTING"):
        plan = choose_action(parse_cards(hand))
        if phase == "DISCARDING":
            wanted = [card.label for card in plan.discards]
            selected = state["selected_discards"]
            if len(selected) < len(wanted):
                return _pick("select_discard", wanted[len(selected)])
            return _pick("confirm_discard") if selected else _pick("play_hand")
        wanted = [card.label for card in plan.submission]
        selected = state["selected_submit"]
        if len(selected) < len(wanted):
            missing = [card for card in wanted if card not in selected]
            return _pick("select_submit", missing[0])
        return _pick("confirm_submit")
    return _advance(phase)


def _advance(phase: str) -> Dict[str, Any]:
    if phase == "DEALING":
        return _pick("start_round")
    if phase == "REVEALING":
        return _pick("continue")
    return _pick("reset")


STYLES: Dict[str, Style] = {"random": random_style, "mirror": mirror_style}


@dataclass
class PlayerStats:
    games: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    rejected: int = 0


async def run_player(name: str, style: Style, url: str, games: int, seed: int, stats: PlayerStats) -> None:
    rng = random.Random(seed)
    try:
        async with connect(url) as ws:
            await ws.send(json.dumps({"type": "hello", "v": 1, "name": name, "seed": seed}))
            while stats.games < games:
                message = json.loads(await ws.recv())
                msg_type = message.get("type")
                if msg_type == "game_over":
                    stats.games += 1
                    winner = message.get("winner")
                    if winner == "player":
                        stats.wins += 1
                    elif winner == "ai":
                        stats.losses += 1
                    else:
                        stats.draws += 1
                    continue
                if msg_type == "error":
                    LOGGER.warning("%s got error %s: %s", name, message.get("code"), message.get("msg"))
                    continue
                if msg_type != "state":
                    continue
                if not message.get("accepted", True):
                    stats.rejected += 1
                action = style(message, rng)
                await ws.send(json.dumps(action))
    except websockets.ConnectionClosed:
        LOGGER.warning("%s lost its connection after %s games", name, stats.games)


async def run_simulation(args: argparse.Namespace) -> Dict[str, PlayerStats]:
    config = GameConfig(total_rounds=args.rounds)
    url = f"ws://{args.host}:{args.port}/"
    server_task = asyncio.create_task(run_server(args.host, args.port, config))
    await asyncio.sleep(0.25)  # allow server socket to bind

    stats: Dict[str, PlayerStats] = {}
    tasks = []
    for idx, style_name in enumerate(args.style or ["mirror"]):
        name = f"{style_name}-{idx}"
        stats[name] = PlayerStats()
        tasks.append(
            asyncio.create_task(
                run_player(name, STYLES[style_name], url, args.games, args.seed + idx, stats[name])
            )
        )
    try:
        await asyncio.gather(*tasks)
    finally:
        server_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await server_task

    LOGGER.info("Simulation complete. Summary:")
    for name, player in stats.items():
        LOGGER.info(
            "  %-10s -> %3d games: %3d won, %3d lost, %3d drawn (%d no-op moves)",
            name,
            player.games,
            player.wins,
            player.losses,
            player.draws,
            player.rejected,
        )
    return stats


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run scripted players against the duel server.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=9877)
    parser.add_argument("--games", type=int, default=20, help="Games per player.")
    parser.add_argument("--rounds", type=int, default=3, help="Rounds per game (1-3).")
    parser.add_argument("--style", action="append", choices=sorted(STYLES), help="Add a player with this style.")
    parser.add_argument("--seed", type=int, default=2024)
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, etc.).")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(message)s")
    asyncio.run(run_simulation(args))


if __name__ == "__main__":
    main()
