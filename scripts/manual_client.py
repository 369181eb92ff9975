#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

import websockets
from websockets.asyncio.client import ClientConnection, connect

logging.basicConfig(level=logging.INFO)

SUIT_SYMBOLS = {"h": "♥", "d": "♦", "c": "♣", "s": "♠"}

# Phase -> (prompt, command letters). Letters map onto wire actions below.
PHASE_HELP = {
    "DEALING": "Deal the next round [d]",
    "DISCARDING": "Toggle up to 2 discards by index, [c]onfirm discard or [p]lay without discarding",
    "SUBMITTING": "Toggle exactly 5 cards by index, then [s]ubmit",
    "REVEALING": "[n]ext",
    "GAME_END": "[r]eset for a new game, [q]uit",
}
COMMANDS = {
    "D": "start_round",
    "C": "confirm_discard",
    "P": "play_hand",
    "S": "confirm_submit",
    "N": "continue",
    "R": "reset",
}


def pretty(label: str) -> str:
    rank = "10" if label[0] == "T" else label[0]
    return f"{rank}{SUIT_SYMBOLS.get(label[1], label[1])}"


class ManualClient:
    def __init__(self, name: str, url: str, seed: Optional[int] = None) -> None:
        self.name = name
        self.url = url
        self.seed = seed
        self.websocket: Optional[ClientConnection] = None
        self.state: Dict[str, Any] = {}

    async def run(self) -> None:
        async with connect(self.url) as ws:
            self.websocket = ws
            hello: Dict[str, Any] = {"type": "hello", "v": 1, "name": self.name}
            if self.seed is not None:
                hello["seed"] = self.seed
            await self._send(hello)
            await self._loop()

    async def _loop(self) -> None:
        assert self.websocket is not None
        while True:
            raw = await self.websocket.recv()
            msg = json.loads(raw)
            self._print_message(msg)
            if msg.get("type") != "state":
                continue
            self.state = msg
            payload = self._prompt()
            if payload is None:
                break
            await self._send(payload)

    def _prompt(self) -> Optional[Dict[str, Any]]:
        phase = self.state.get("phase", "")
        hand: List[str] = self.state.get("hand", [])
        while True:
            choice = input(f"{PHASE_HELP.get(phase, phase)} (h=help): ").strip().upper()
            if choice == "H":
                self._render_hand()
                continue
            if choice == "Q":
                return None
            if choice.isdigit():
                idx = int(choice)
                if not 0 <= idx < len(hand):
                    print("No card at that index")
                    continue
                action = "select_discard" if phase == "DISCARDING" else "select_submit"
                return {"type": "action", "v": 1, "action": action, "card": hand[idx]}
            action = COMMANDS.get(choice)
            if action is None:
                print("Unknown command. Try again.")
                continue
            return {"type": "action", "v": 1, "action": action}

    def _render_hand(self) -> None:
        hand = self.state.get("hand", [])
        picked = set(self.state.get("selected_discards", [])) | set(self.state.get("selected_submit", []))
        cells = []
        for idx, label in enumerate(hand):
            marker = "*" if label in picked else " "
            cells.append(f"{idx}:{pretty(label)}{marker}")
        print("Hand: " + "  ".join(cells) if cells else "Hand: (empty)")

    def _print_message(self, msg: Dict[str, Any]) -> None:
        msg_type = msg.get("type", "?")
        print(f"\n>>> {msg_type.upper()}")
        if msg_type == "welcome":
            print(f"Playing as {msg.get('name')}, config: {json.dumps(msg.get('config'))}")
        elif msg_type == "state":
            score = msg.get("score", {})
            print(
                f"Round {msg.get('round')}/{msg.get('total_rounds')} | Phase {msg.get('phase')} | "
                f"You {score.get('player')} - {score.get('ai')} Computer (ties {score.get('ties')}) | "
                f"Deck {msg.get('deck_remaining')}"
            )
            if not msg.get("accepted", True):
                print("That move is not available right now.")
            self.state = msg
            self._render_hand()
            if msg.get("result"):
                self._print_result(msg["result"])
        elif msg_type == "game_over":
            score = msg.get("score", {})
            print(f"Winner: {msg.get('winner')} | final score {score.get('player')}-{score.get('ai')}")
        elif msg_type == "error":
            print(f"Error {msg.get('code')}: {msg.get('msg')}")
        else:
            print(json.dumps(msg, indent=2))

    def _print_result(self, result: Dict[str, Any]) -> None:
        for side in ("player", "ai"):
            hand = result.get(side, {})
            print(f"  {side:>6}: {hand.get('text')}")
        print(f"  Round {result.get('round')} winner: {result.get('winner')}")

    async def _send(self, payload: Dict[str, Any]) -> None:
        assert self.websocket is not None
        await self.websocket.send(json.dumps(payload))


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seven-card duel terminal client")
    parser.add_argument("--url", default="ws://127.0.0.1:9876/")
    parser.add_argument("--name", default="PLAYER")
    parser.add_argument("--seed", type=int, default=None)
    return parser.parse_args(argv)


def main(argv: list[str]) -> None:
    args = parse_args(argv)
    client = ManualClient(name=args.name, url=args.url, seed=args.seed)
    try:
        asyncio.run(client.run())
    except (KeyboardInterrupt, websockets.ConnectionClosed):
        print("\nSession closed")


if __name__ == "__main__":
    main(sys.argv[1:])
