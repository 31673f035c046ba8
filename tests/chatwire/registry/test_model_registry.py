import threading

import pytest

from chatwire.core.exceptions import ModelNotSupportedError
from chatwire.registry.descriptor import ModelDescriptor, WireFormat
from chatwire.registry.model_registry import ModelRegistry, model_registry


def test_singleton() -> None:
    assert ModelRegistry() is model_registry


def test_lookup_bare_and_qualified() -> None:
    bare = model_registry.lookup('deepseek-chat')
    assert bare is not None
    assert bare.wire_format is WireFormat.generic_chat
    assert model_registry.lookup('DeepSeek:deepseek-chat') == bare
    assert model_registry.lookup('no-such-model') is None
    assert model_registry.lookup('bad:id:format') is None


def test_bare_qwen_turbo_resolves_to_compatible_mode() -> None:
    generic = model_registry.get('qwen-turbo')
    native = model_registry.get('dashscope-native:qwen-turbo')
    assert generic.wire_format is WireFormat.generic_chat
    assert generic.default_max_tokens == 1000
    assert native.wire_format is WireFormat.native
    assert not native.can_stream


def test_unknown_model() -> None:
    with pytest.raises(ModelNotSupportedError, match='no-such'):
        model_registry.get('no-such')


def test_register_custom_model() -> None:
    descriptor = ModelDescriptor(id='local-llm', provider='testprov', endpoint='http://localhost:8080/v1/chat')
    model_registry.register(descriptor)
    assert 'testprov:local-llm' in model_registry.available_models()
    assert model_registry.get('testprov:local-llm') is descriptor


def test_catalog_filters() -> None:
    streaming = model_registry.streaming_models()
    assert all(d.can_stream for d in streaming)
    assert model_registry.get('dashscope-native:qwen-turbo') not in streaming
    assert all((d.context_length or 0) >= 32768 for d in model_registry.long_context_models())
    assert model_registry.get('deepseek-coder') in model_registry.models_with_capability('code-generation')
    assert [d.id for d in model_registry.free_models()] == ['deepseek-chat']


def test_mapping_is_a_copy() -> None:
    mapping = model_registry.mapping()
    mapping.clear()  # type: ignore[attr-defined]
    assert model_registry.lookup('deepseek-chat') is not None


def _private_registry() -> ModelRegistry:
    registry = object.__new__(ModelRegistry)
    registry.__init__([])
    return registry


def test_bare_lookup_while_registering_from_another_thread() -> None:
    registry = _private_registry()
    errors: list[BaseException] = []

    def register_many() -> None:
        for i in range(5000):
            registry.register(ModelDescriptor(id=f'm{i}', provider='bulk', endpoint='http://localhost/v1/chat'))

    writer = threading.Thread(target=register_many)
    writer.start()
    try:
        while writer.is_alive():
            try:
                registry.lookup('not-registered')
                registry.streaming_models()
            except RuntimeError as exc:
                errors.append(exc)
                break
    finally:
        writer.join()
    assert errors == []
    assert registry.get('m4999').qualified_id == 'bulk:m4999'
