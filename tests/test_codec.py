"""Tests for the newline-delimited JSON frame codec."""

import json

import pytest

from distirc.errors import ProtocolError
from distirc.model import BufKey, Line
from distirc.protocol import (
    Auth,
    AuthResult,
    Command,
    Control,
    FrameDecoder,
    LineDelta,
    Subscribe,
    decode_frame,
    encode,
)


class TestEncode:
    """Test frame encoding."""

    def test_auth_uses_wire_field_names(self):
        frame = encode(Auth(user="alice", password="hunter2"))
        assert frame.endswith(b"\n")
        obj = json.loads(frame)
        assert obj == {"type": "auth", "user": "alice", "pass": "hunter2"}

    def test_auth_repr_hides_password(self):
        assert "hunter2" not in repr(Auth(user="alice", password="hunter2"))

    def test_subscribe_all_omits_targets(self):
        assert json.loads(encode(Subscribe())) == {"type": "subscribe"}

    def test_command(self):
        obj = json.loads(encode(Command(target=BufKey.channel("#c"), text="hi")))
        assert obj["type"] == "command"
        assert obj["target"] == {"kind": "channel", "name": "#c"}
        assert obj["text"] == "hi"


class TestDecodeFrame:
    """Test decoding of single frames."""

    def test_auth_result(self):
        msg = decode_frame(b'{"type": "auth_result", "ok": false, "reason": "bad password"}')
        assert isinstance(msg, AuthResult)
        assert not msg.ok
        assert msg.reason == "bad password"

    def test_line_delta(self):
        raw = encode(LineDelta(target=BufKey.channel("#t"), line=Line.message("bob", "yo")))
        msg = decode_frame(raw.rstrip(b"\n"))
        assert isinstance(msg, LineDelta)
        assert msg.target == BufKey.channel("#t")
        assert msg.line.text == "yo"

    def test_unknown_fields_ignored(self):
        msg = decode_frame(b'{"type": "control", "action": "ping", "future": 1}')
        assert msg == Control.ping()

    def test_unknown_type_skipped(self):
        assert decode_frame(b'{"type": "presence", "who": "x"}') is None

    @pytest.mark.parametrize(
        "raw",
        [
            b"not json",
            b"[1, 2]",
            b'{"no_type": true}',
            b'{"type": "auth_result"}',
            b"\xff\xfe",
        ],
    )
    def test_malformed_frames_raise(self, raw):
        with pytest.raises(ProtocolError):
            decode_frame(raw)


class TestFrameDecoder:
    """Test incremental framing."""

    def test_split_across_reads(self):
        decoder = FrameDecoder()
        frame = encode(Control.ping())
        assert list(decoder.iter_messages(frame[:5])) == []
        assert decoder.pending == 5
        assert list(decoder.iter_messages(frame[5:])) == [Control.ping()]
        assert decoder.pending == 0

    def test_several_frames_in_one_read(self):
        decoder = FrameDecoder()
        data = encode(Control.ping()) + encode(Control.pong()) + b'{"type": "con'
        assert list(decoder.iter_messages(data)) == [Control.ping(), Control.pong()]
        assert decoder.pending == len(b'{"type": "con')

    def test_crlf_and_blank_lines(self):
        decoder = FrameDecoder()
        frames = decoder.feed(b'\r\n{"type": "control", "action": "ping"}\r\n\n')
        assert frames == [b'{"type": "control", "action": "ping"}']

    def test_frames_before_malformed_one_are_yielded(self):
        decoder = FrameDecoder()
        data = encode(Control.ping()) + b"garbage\n"
        received = []
        with pytest.raises(ProtocolError):
            for msg in decoder.iter_messages(data):
                received.append(msg)
        assert received == [Control.ping()]

    def test_oversized_partial_frame_rejected(self):
        decoder = FrameDecoder(max_frame_bytes=16)
        with pytest.raises(ProtocolError, match="exceeds 16 bytes"):
            list(decoder.iter_messages(b"x" * 17))

    def test_oversized_complete_frame_rejected(self):
        decoder = FrameDecoder(max_frame_bytes=16)
        with pytest.raises(ProtocolError):
            list(decoder.iter_messages(b"y" * 20 + b"\n"))

    def test_frames_before_oversized_one_are_yielded(self):
        delta = LineDelta(target=BufKey.channel("#a"), line=Line.message("bob", "hi"))
        decoder = FrameDecoder(max_frame_bytes=512)
        received = []
        with pytest.raises(ProtocolError) as excinfo:
            for msg in decoder.iter_messages(encode(delta) + b"x" * 600 + b"\n"):
                received.append(msg)
        assert [m.line.text for m in received] == ["hi"]
        assert excinfo.value.data == {"size": 600}

    def test_oversized_frame_keeps_decoder_failed_until_reset(self):
        decoder = FrameDecoder(max_frame_bytes=16)
        assert decoder.feed(b"z" * 17) == []
        assert decoder.error is not None
        with pytest.raises(ProtocolError):
            decoder.feed(encode(Control.pong()))
        decoder.reset()
        assert decoder.error is None

    def test_reset_drops_partial_frame(self):
        decoder = FrameDecoder()
        decoder.feed(b'{"type"')
        decoder.reset()
        assert decoder.pending == 0
        assert list(decoder.iter_messages(encode(Control.pong()))) == [Control.pong()]
