from __future__ import annotations

import argparse
import asyncio
import json
import logging
from http import HTTPStatus
from typing import Any, Dict, Optional

import websockets
from websockets.asyncio.server import ServerConnection, serve
from websockets.http11 import Request, Response

from core.cards import Card, parse_label
from core.game import GameEngine, result_payload
from core.models import Action, GameConfig, GameState, Phase

LOGGER = logging.getLogger("duel_server")

PROTOCOL_VERSION = 1
CARD_ACTIONS = {Action.SELECT_DISCARD, Action.SELECT_SUBMIT}


class DuelServerError(Exception):
    def __init__(self, code: str, msg: str) -> None:
        super().__init__(msg)
        self.code = code
        self.msg = msg


def _config_payload(config: GameConfig) -> Dict[str, Any]:
    return {"total_rounds": config.total_rounds, "seed": config.seed}


async def _send_error(websocket: ServerConnection, code: str, msg: str) -> None:
    await websocket.send(json.dumps({"type": "error", "code": code, "msg": msg}))


class DuelSession:
    """One human at a websocket against the house player."""

    def __init__(self, websocket: ServerConnection, config: GameConfig, name: str = "PLAYER") -> None:
        self.websocket = websocket
        self.config = config
        self.name = name
        self.engine = GameEngine(config)

    async def run(self) -> None:
        await self.send_json({"type": "welcome", "name": self.name, "config": _config_payload(self.config)})
        await self.send_state(accepted=True)
        async for raw in self.websocket:
            try:
                action, card = self.parse_action(raw)
            except DuelServerError as exc:
                await _send_error(self.websocket, exc.code, exc.msg)
                continue
            await self.apply(action, card)

    def parse_action(self, raw: str | bytes) -> tuple[Action, Optional[Card]]:
        try:
            message = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise DuelServerError("BAD_JSON", f"Malformed JSON: {exc.msg}") from exc
        if not isinstance(message, dict) or message.get("type") != "action":
            raise DuelServerError("BAD_MESSAGE", "Expected an action message")

        try:
            action = Action(message.get("action"))
        except ValueError as exc:
            raise DuelServerError("BAD_ACTION", f"Unknown action: {message.get('action')}") from exc

        card: Optional[Card] = None
        if action in CARD_ACTIONS:
            label = message.get("card")
            if not isinstance(label, str):
                raise DuelServerError("BAD_CARD", f"{action.value} needs a card label")
            try:
                card = parse_label(label)
            except ValueError as exc:
                raise DuelServerError("BAD_CARD", str(exc)) from exc
        return action, card

    async def apply(self, action: Action, card: Optional[Card]) -> GameState:
        before = self.engine.snapshot()
        accepted, after = self.engine.step(action, card)
        if not accepted:
            LOGGER.debug("%s: %s had no effect in %s", self.name, action.value, before.phase.value)
        # game_over goes first so clients see the final tally before the next prompt.
        if accepted and after.phase == Phase.GAME_END and before.phase != Phase.GAME_END:
            await self.send_json({"type": "game_over", **self.game_over_payload(after)})
        await self.send_state(accepted=accepted)
        return after

    def game_over_payload(self, state: GameState) -> Dict[str, Any]:
        winner = state.overall_winner
        return {
            "winner": winner.value if winner else None,
            "score": {"player": state.player_wins, "ai": state.ai_wins, "ties": state.ties},
            "rounds": [result_payload(result) for result in state.round_results],
        }

    async def send_state(self, accepted: bool) -> None:
        await self.send_json({"type": "state", "accepted": accepted, **self.engine.state_payload()})

    async def send_json(self, payload: Dict[str, Any]) -> None:
        await self.websocket.send(json.dumps({"v": PROTOCOL_VERSION, **payload}))


async def handle_connection(websocket: ServerConnection, config: GameConfig) -> None:
    try:
        raw = await websocket.recv()
    except websockets.ConnectionClosed:
        LOGGER.info("Connection closed before hello")
        return
    try:
        hello = json.loads(raw)
    except json.JSONDecodeError:
        await _send_error(websocket, "BAD_JSON", "Expected hello")
        return
    if not isinstance(hello, dict) or hello.get("type") != "hello":
        await _send_error(websocket, "BAD_HELLO", "Expected hello")
        return
    # Clients that omit the version speak the current one.
    if hello.get("v", PROTOCOL_VERSION) != PROTOCOL_VERSION:
        await _send_error(websocket, "BAD_HELLO", f"Unsupported protocol version {hello.get('v')!r}")
        return

    name_raw = hello.get("name")
    name = name_raw.strip() if isinstance(name_raw, str) else ""
    if not name:
        name = "PLAYER"

    session_config = config
    seed = hello.get("seed")
    if seed is not None:
        if isinstance(seed, bool) or not isinstance(seed, int):
            await _send_error(websocket, "BAD_HELLO", "seed must be an integer")
            return
        session_config = GameConfig(total_rounds=config.total_rounds, seed=seed)

    LOGGER.info("%s joined", name)
    session = DuelSession(websocket, session_config, name=name)
    try:
        await session.run()
    except websockets.ConnectionClosed:
        LOGGER.info("%s disconnected", name)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Duel session crashed for %s: %s", name, exc)


def _process_request(connection: ServerConnection, request: Request) -> Optional[Response]:
    """Answer plain HTTP health checks; let websocket upgrades through."""

    if request.headers.get("Upgrade", "").lower() == "websocket":
        return None
    if request.path in {"/", "/health", "/healthz"}:
        return connection.respond(HTTPStatus.OK, "duel server running\n")
    return connection.respond(HTTPStatus.NOT_FOUND, "not found\n")


async def run_server(host: str, port: int, config: GameConfig) -> None:
    async def _handler(ws: ServerConnection) -> None:
        await handle_connection(ws, config)

    async with serve(_handler, host, port, process_request=_process_request) as server:
        LOGGER.info("Duel server listening on %s:%s", host, port)
        await server.serve_forever()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seven-card duel server (human vs computer)")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=9876)
    parser.add_argument("--rounds", type=int, default=3, help="Rounds per game (1-3)")
    parser.add_argument("--seed", type=int, default=None, help="Seed every game's shuffle")
    args = parser.parse_args()

    try:
        config = GameConfig(total_rounds=args.rounds, seed=args.seed)
    except ValueError as exc:
        parser.error(str(exc))
    asyncio.run(run_server(args.host, args.port, config))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
