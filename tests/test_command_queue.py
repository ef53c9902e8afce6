"""Tests for the bounded outbound command queue."""

from unittest.mock import Mock

import pytest

from distirc.errors import ChannelClosed
from distirc.model import BufKey
from distirc.protocol import Command
from distirc.session import CommandQueue


def _cmd(text):
    return Command(target=BufKey.channel("#q"), text=text)


class TestCommandQueue:
    """Test CommandQueue behaviour."""

    def test_fifo(self):
        queue = CommandQueue(4)
        for text in ("a", "b"):
            assert queue.submit(_cmd(text))
        assert len(queue) == 2
        assert queue.pop().text == "a"
        assert queue.pop().text == "b"
        assert queue.pop() is None

    def test_full_queue_drops_and_reports(self):
        on_drop = Mock()
        queue = CommandQueue(2, on_drop=on_drop)
        assert queue.submit(_cmd("1"))
        assert queue.submit(_cmd("2"))
        assert not queue.submit(_cmd("3"))
        assert queue.dropped == 1
        on_drop.assert_called_once()
        assert on_drop.call_args.args[0].text == "3"
        assert len(queue) == 2

    def test_waker_called_on_submit_and_close(self):
        waker = Mock()
        queue = CommandQueue(1)
        queue.set_waker(waker)
        queue.submit(_cmd("x"))
        assert waker.call_count == 1
        queue.submit(_cmd("dropped"))
        assert waker.call_count == 1
        queue.close()
        assert waker.call_count == 2
        queue.close()
        assert waker.call_count == 2

    def test_submit_after_close_raises(self):
        queue = CommandQueue(1)
        queue.close()
        assert queue.closed
        with pytest.raises(ChannelClosed):
            queue.submit(_cmd("late"))

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            CommandQueue(0)
