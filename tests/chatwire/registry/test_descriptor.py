from chatwire.registry.descriptor import ModelDescriptor, WireFormat

ENDPOINT = 'https://api.deepseek.com/v1/chat/completions'


def _descriptor(**kwargs: object) -> ModelDescriptor:
    return ModelDescriptor(id='m', provider='p', endpoint=ENDPOINT, **kwargs)


def test_endpoint_for_without_base_url() -> None:
    assert _descriptor().endpoint_for(None) == ENDPOINT


def test_endpoint_for_replaces_host() -> None:
    assert _descriptor().endpoint_for('http://localhost:9000/') == 'http://localhost:9000/v1/chat/completions'


def test_endpoint_for_prefixes_base_path() -> None:
    endpoint = _descriptor().endpoint_for('https://gw.example/deepseek')
    assert endpoint == 'https://gw.example/deepseek/v1/chat/completions'


def test_can_stream_needs_flag_and_envelope() -> None:
    assert _descriptor().can_stream
    assert not _descriptor(supports_streaming=False).can_stream
    assert not _descriptor(wire_format=WireFormat.native).can_stream


def test_qualified_id() -> None:
    assert _descriptor().qualified_id == 'p:m'
