"""
End-to-end tests for the WebSocket relay endpoint.

These drive the FastAPI app through TestClient websockets with a
fixed-table gateway (``hello`` <-> ``bonjour``), so they exercise frame
decoding, the registry, the router and the outbound encoding together.
"""

import time

import pytest

from polyglot_chat.api.server import create_app
from tests.fakes import DictionaryGateway


def _join(ws, room, player, language, name=None):
    frame = {"type": "join", "roomId": room, "playerId": player, "language": language}
    if name is not None:
        frame["name"] = name
    ws.send_json(frame)


def _registry(client):
    return client.app.state.listener.registry


def _wait_for_member(client, room, player, timeout=2.0):
    """Block until the relay has applied a join sent from another socket."""
    deadline = time.monotonic() + timeout
    while _registry(client).lookup(room, player) is None:
        assert time.monotonic() < deadline, f"{player} never joined {room}"
        time.sleep(0.01)


@pytest.mark.integration
class TestRelaySocket:
    def test_two_languages_hello(self, test_client):
        with test_client.websocket_connect("/") as alice:
            _join(alice, "room-1", "p1", "en", name="Alice")
            _wait_for_member(test_client, "room-1", "p1")
            with test_client.websocket_connect("/") as bob:
                _join(bob, "room-1", "p2", "fr")

                assert alice.receive_json() == {"type": "info", "content": "p2 joined the room."}

                alice.send_json(
                    {"type": "message", "roomId": "room-1", "playerId": "p1", "content": "hello"}
                )

                assert bob.receive_json() == {
                    "type": "message",
                    "fromId": "p1",
                    "fromName": "Alice",
                    "originalContent": "hello",
                    "translatedContent": "bonjour",
                    "originalLanguage": "en",
                }

    def test_reply_is_translated_back(self, test_client):
        with test_client.websocket_connect("/ws") as alice:
            _join(alice, "room-1", "p1", "en")
            _wait_for_member(test_client, "room-1", "p1")
            with test_client.websocket_connect("/ws") as bob:
                _join(bob, "room-1", "p2", "fr")
                alice.receive_json()  # join notice

                bob.send_json(
                    {"type": "message", "roomId": "room-1", "playerId": "p2", "content": "bonjour"}
                )

                delivery = alice.receive_json()
                assert delivery["translatedContent"] == "hello"
                assert delivery["originalLanguage"] == "fr"
                assert delivery["fromName"] == "p2"

    def test_change_language_applies_to_next_message(self, test_client):
        with test_client.websocket_connect("/") as alice:
            _join(alice, "room-1", "p1", "en")
            _wait_for_member(test_client, "room-1", "p1")
            with test_client.websocket_connect("/") as bob:
                _join(bob, "room-1", "p2", "fr")
                alice.receive_json()

                # Frames from one socket are applied in order.
                alice.send_json(
                    {"type": "change-language", "roomId": "room-1", "playerId": "p1", "language": "fr"}
                )
                alice.send_json(
                    {"type": "message", "roomId": "room-1", "playerId": "p1", "content": "hello"}
                )

                delivery = bob.receive_json()
                assert delivery["originalLanguage"] == "fr"
                assert delivery["translatedContent"] == "hello"

    def test_disconnect_removes_participant_and_room(self, test_client):
        with test_client.websocket_connect("/") as alice:
            _join(alice, "room-1", "p1", "en")
            _wait_for_member(test_client, "room-1", "p1")
            with test_client.websocket_connect("/") as bob:
                _join(bob, "room-1", "p2", "fr")
                alice.receive_json()
                assert _registry(test_client).snapshot() == {
                    "room-1": {"p1": ("p1", "en"), "p2": ("p2", "fr")}
                }

            assert _registry(test_client).snapshot() == {"room-1": {"p1": ("p1", "en")}}

        assert _registry(test_client).snapshot() == {}

    def test_malformed_frame_keeps_connection_open(self, test_client):
        with test_client.websocket_connect("/") as alice:
            alice.send_text("this is not json")
            alice.send_json({"type": "teleport"})
            _join(alice, "room-1", "p1", "en")
            _wait_for_member(test_client, "room-1", "p1")
            with test_client.websocket_connect("/") as bob:
                _join(bob, "room-1", "p2", "fr")

                assert alice.receive_json()["type"] == "info"

    def test_message_before_join_is_ignored(self, test_client):
        with test_client.websocket_connect("/") as alice:
            _join(alice, "room-1", "p1", "en")
            _wait_for_member(test_client, "room-1", "p1")
            with test_client.websocket_connect("/") as stranger:
                stranger.send_json(
                    {"type": "message", "roomId": "room-1", "playerId": "ghost", "content": "hi"}
                )
                _join(stranger, "room-1", "p2", "fr")

                # The only frame alice sees is the join notice, not the message.
                assert alice.receive_json() == {"type": "info", "content": "p2 joined the room."}


@pytest.mark.integration
def test_echo_to_sender(relay_config):
    relay_config.relay.echo_to_sender = True
    gateway = DictionaryGateway({("hello", "fr"): "bonjour"})

    from fastapi.testclient import TestClient

    with TestClient(create_app(relay_config, gateway=gateway)) as client:
        with client.websocket_connect("/") as alice:
            _join(alice, "room-1", "p1", "en")
            alice.send_json(
                {"type": "message", "roomId": "room-1", "playerId": "p1", "content": "hello"}
            )

            echoed = alice.receive_json()
            assert echoed["translatedContent"] == "hello"
            assert echoed["fromId"] == "p1"

    assert gateway.calls == []


@pytest.mark.integration
def test_lifespan_opens_and_closes_gateway(relay_config):
    gateway = DictionaryGateway({})

    from fastapi.testclient import TestClient

    with TestClient(create_app(relay_config, gateway=gateway)):
        assert gateway.opened is True
        assert gateway.closed is False

    assert gateway.closed is True
