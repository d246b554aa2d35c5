"""Tests for the wire protocol: decoding inbound frames, encoding outbound ones."""

import json

import pytest

from polyglot_chat.core.events import (
    ChangeLanguageFrame,
    ChatDeliveryFrame,
    FrameDecodeError,
    InfoFrame,
    JoinFrame,
    MessageFrame,
    decode_frame,
    encode_frame,
)

# ============================================================================
# DECODING
# ============================================================================


@pytest.mark.unit
class TestDecodeFrame:
    def test_join(self):
        frame = decode_frame(
            '{"type": "join", "roomId": "r", "playerId": "p", "name": "Pat", "language": "en"}'
        )
        assert frame == JoinFrame(room_id="r", player_id="p", name="Pat", language="en", type="join")

    def test_join_without_name(self):
        frame = decode_frame('{"type": "join", "roomId": "r", "playerId": "p", "language": "en"}')
        assert isinstance(frame, JoinFrame)
        assert frame.name is None

    def test_change_language(self):
        frame = decode_frame(
            '{"type": "change-language", "roomId": "r", "playerId": "p", "language": "fr"}'
        )
        assert isinstance(frame, ChangeLanguageFrame)
        assert frame.language == "fr"

    def test_message(self):
        frame = decode_frame(
            '{"type": "message", "roomId": "r", "playerId": "p", "content": "hi"}'
        )
        assert isinstance(frame, MessageFrame)
        assert frame.content == "hi"

    def test_extra_fields_are_ignored(self):
        frame = decode_frame(
            '{"type": "message", "roomId": "r", "playerId": "p", "content": "hi", "ts": 1}'
        )
        assert isinstance(frame, MessageFrame)

    def test_bytes_payload(self):
        frame = decode_frame(b'{"type": "message", "roomId": "r", "playerId": "p", "content": ""}')
        assert frame.content == ""

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "not json",
            "[]",
            '{"roomId": "r"}',
            '{"type": "shout", "roomId": "r", "playerId": "p"}',
            '{"type": "join", "roomId": "r", "playerId": "p"}',
            '{"type": "message", "roomId": "r", "playerId": "p", "content": 5}',
        ],
    )
    def test_invalid_frames_raise(self, raw):
        with pytest.raises(FrameDecodeError):
            decode_frame(raw)

    def test_decode_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            decode_frame("{")


# ============================================================================
# ENCODING
# ============================================================================


@pytest.mark.unit
class TestEncodeFrame:
    def test_chat_delivery_uses_camel_case(self):
        frame = ChatDeliveryFrame(
            from_id="p1",
            from_name="Alice",
            original_content="hello",
            translated_content="bonjour",
            original_language="en",
        )
        assert json.loads(encode_frame(frame)) == {
            "type": "message",
            "fromId": "p1",
            "fromName": "Alice",
            "originalContent": "hello",
            "translatedContent": "bonjour",
            "originalLanguage": "en",
        }

    def test_info(self):
        assert json.loads(encode_frame(InfoFrame(content="p2 joined the room."))) == {
            "type": "info",
            "content": "p2 joined the room.",
        }

    def test_non_ascii_text_survives(self):
        frame = InfoFrame(content="こんにちは")
        assert json.loads(encode_frame(frame))["content"] == "こんにちは"
