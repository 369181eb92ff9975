import asyncio
import json
from http import HTTPStatus

import websockets
from websockets.datastructures import Headers
from websockets.http11 import Request

from core.models import GameConfig
from duel.server import DuelSession, _process_request, handle_connection

from .helpers import stack_deck

ROYAL_VS_JUNK = [
    "Ts", "Js", "Qs", "Ks", "As", "2h", "3d",
    "2c", "4d", "6h", "8s", "9c", "Jd", "3c",
]


# Scripted socket: recv/iteration replay ``incoming``, sends are captured.
class DummyWebSocket:
    def __init__(self, incoming: list) -> None:
        self.incoming = [msg if isinstance(msg, str) else json.dumps(msg) for msg in incoming]
        self.sent: list[str] = []

    async def recv(self) -> str:
        return self.incoming.pop(0)

    async def send(self, message: str) -> None:
        self.sent.append(message)

    def __aiter__(self):
        return self

    async def __anext__(self) -> str:
        if not self.incoming:
            raise StopAsyncIteration
        return self.incoming.pop(0)

    def messages(self) -> list[dict]:
        return [json.loads(raw) for raw in self.sent]


class DummyConnection:
    def respond(self, status, text):
        return status, text


def action(name, card=None):
    message = {"type": "action", "action": name}
    if card is not None:
        message["card"] = card
    return message


def run(incoming, config=None):
    websocket = DummyWebSocket(incoming)
    asyncio.run(handle_connection(websocket, config or GameConfig(seed=7)))
    return websocket.messages()


def test_hello_gets_welcome_and_opening_state():
    messages = run([{"type": "hello", "name": "  Ada  "}])
    assert [msg["type"] for msg in messages] == ["welcome", "state"]
    welcome, state = messages
    assert welcome["v"] == 1
    assert welcome["name"] == "Ada"
    assert welcome["config"] == {"total_rounds": 3, "seed": 7}
    assert state["phase"] == "DEALING"
    assert state["legal"] == ["start_round", "reset"]


def test_missing_name_defaults_to_player():
    welcome = run([{"type": "hello"}])[0]
    assert welcome["name"] == "PLAYER"


def test_rejects_non_hello_first_message():
    messages = run([action("start_round")])
    assert messages == [{"type": "error", "code": "BAD_HELLO", "msg": "Expected hello"}]


def test_rejects_malformed_hello():
    messages = run(["{not json"])
    assert messages[0]["code"] == "BAD_JSON"


def test_rejects_non_integer_seed():
    messages = run([{"type": "hello", "seed": "abc"}])
    assert messages[0]["code"] == "BAD_HELLO"
    assert "seed" in messages[0]["msg"]


def test_hello_seed_overrides_server_seed():
    welcome = run([{"type": "hello", "seed": 11}], GameConfig(total_rounds=2, seed=3))[0]
    assert welcome["config"] == {"total_rounds": 2, "seed": 11}


def test_bad_frames_get_errors_and_session_keeps_going():
    messages = run([
        {"type": "hello"},
        "[oops",
        {"type": "chat"},
        action("fold"),
        action("select_discard"),
        action("select_discard", "Zz"),
        action("start_round"),
    ])
    errors = [msg["code"] for msg in messages if msg["type"] == "error"]
    assert errors == ["BAD_JSON", "BAD_MESSAGE", "BAD_ACTION", "BAD_CARD", "BAD_CARD"]
    final = messages[-1]
    assert final["type"] == "state"
    assert final["phase"] == "DISCARDING"
    assert len(final["hand"]) == 7


def test_out_of_phase_action_is_not_accepted():
    messages = run([{"type": "hello"}, action("confirm_submit")])
    state = messages[-1]
    assert state["type"] == "state"
    assert state["accepted"] is False
    assert state["phase"] == "DEALING"


def test_full_single_round_game_over_websocket(monkeypatch):
    stack_deck(monkeypatch, ROYAL_VS_JUNK)
    incoming = [{"type": "hello", "name": "Ada"}, action("start_round"), action("play_hand")]
    incoming += [action("select_submit", label) for label in ["Ts", "Js", "Qs", "Ks", "As"]]
    incoming += [action("confirm_submit"), action("continue")]

    messages = run(incoming, GameConfig(total_rounds=1))
    states = [msg for msg in messages if msg["type"] == "state"]
    assert all(state["accepted"] for state in states)

    reveal = states[-2]
    assert reveal["phase"] == "REVEALING"
    assert reveal["result"]["winner"] == "player"
    assert reveal["result"]["ai"]["rank"] == "Pair"
    assert "ai_hand" not in reveal

    game_over, final = messages[-2:]
    assert game_over["type"] == "game_over"
    assert game_over["winner"] == "player"
    assert game_over["score"] == {"player": 1, "ai": 0, "ties": 0}
    assert len(game_over["rounds"]) == 1
    assert final["phase"] == "GAME_END"
    assert final["ai_hand"] == ["6h", "3h"]


def test_parse_action_reads_card_labels():
    session = DuelSession(DummyWebSocket([]), GameConfig())
    parsed_action, card = session.parse_action(json.dumps(action("select_submit", "10h")))
    assert parsed_action.value == "select_submit"
    assert card is not None and card.label == "Th"


def test_health_check_answers_plain_http():
    connection = DummyConnection()
    status, text = _process_request(connection, Request("/health", Headers()))
    assert status == HTTPStatus.OK
    assert "running" in text

    status, _ = _process_request(connection, Request("/nope", Headers()))
    assert status == HTTPStatus.NOT_FOUND

    upgrade = Request("/", Headers({"Upgrade": "websocket"}))
    assert _process_request(connection, upgrade) is None


def test_reset_on_fresh_game_is_accepted():
    messages = run([{"type": "hello"}, action("reset")])
    state = messages[-1]
    assert state["type"] == "state"
    assert state["accepted"] is True
    assert state["phase"] == "DEALING"
    assert "reset" in state["legal"]


def test_rejects_boolean_seed():
    messages = run([{"type": "hello", "seed": True}])
    assert [msg["type"] for msg in messages] == ["error"]
    assert messages[0]["code"] == "BAD_HELLO"


def test_rejects_unknown_protocol_version():
    messages = run([{"type": "hello", "v": 2}])
    assert messages[0]["code"] == "BAD_HELLO"
    assert "version" in messages[0]["msg"]


def test_hello_with_current_version_is_welcomed():
    messages = run([{"type": "hello", "v": 1}])
    assert messages[0]["type"] == "welcome"


class ClosedWebSocket(DummyWebSocket):
    async def recv(self) -> str:
        raise websockets.ConnectionClosed(None, None)


def test_disconnect_before_hello_ends_quietly():
    websocket = ClosedWebSocket([])
    asyncio.run(handle_connection(websocket, GameConfig()))
    assert websocket.sent == []
