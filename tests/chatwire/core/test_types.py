from __future__ import annotations

import pydantic
import pytest

from chatwire.core.types import ChatMessage, GenerationOptions, OHLCVRecord, Role, StreamEvent


def test_chat_message_is_immutable_and_keeps_whitespace() -> None:
    msg = ChatMessage.user('  padded  ')
    assert msg.role is Role.user
    assert msg.content == '  padded  '
    assert msg.to_wire() == {'role': 'user', 'content': '  padded  '}
    with pytest.raises(pydantic.ValidationError):
        msg.content = 'changed'  # type: ignore[misc]


def test_options_default_to_unset() -> None:
    opts = GenerationOptions()
    assert opts.temperature is None
    assert opts.max_tokens is None
    assert opts.stop is None
    assert opts.stream is False


def test_options_reject_unknown_fields() -> None:
    with pytest.raises(pydantic.ValidationError):
        GenerationOptions(seed=3)  # type: ignore[call-arg]


def test_options_range_checks() -> None:
    with pytest.raises(pydantic.ValidationError):
        GenerationOptions(temperature=3.0)
    with pytest.raises(pydantic.ValidationError):
        GenerationOptions(max_tokens=0)


def test_stop_is_deduplicated_in_order() -> None:
    assert GenerationOptions(stop=['b', 'a', 'b']).stop == ('b', 'a')
    assert GenerationOptions(stop='END').stop == ('END',)


def test_stream_event_final() -> None:
    assert StreamEvent.final() == StreamEvent(delta_text='', is_final=True)


def test_ohlcv_record_invariants() -> None:
    OHLCVRecord(open=1, high=2, low=0, close=1, volume=0)
    with pytest.raises(pydantic.ValidationError, match='high cannot be lower than low'):
        OHLCVRecord(open=1, high=1, low=2, close=1, volume=5)
    with pytest.raises(pydantic.ValidationError, match='close must be between low and high'):
        OHLCVRecord(open=1, high=2, low=1, close=3, volume=5)
    with pytest.raises(pydantic.ValidationError, match='volume must be non-negative'):
        OHLCVRecord(open=1, high=2, low=1, close=1.5, volume=-1)
