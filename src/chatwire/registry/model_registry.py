"""registry.model_registry

Global registry that maps model identifiers to their read-only
`ModelDescriptor` (endpoint, wire format, limits, capability flags).

Identifiers are accepted either qualified (``"deepseek:deepseek-chat"``) or
bare (``"deepseek-chat"``); a bare name resolves to the first registered
descriptor with that name.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from chatwire.core.exceptions import ModelNotSupportedError
from chatwire.core.model_id import ModelId
from chatwire.registry.catalog import BUILTIN_MODELS

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, MutableMapping

    from chatwire.registry.descriptor import ModelDescriptor


class _ThreadSafeSingleton(type):
    """Metaclass ensuring a single registry instance across threads."""

    _instance: ModelRegistry | None = None
    _lock = threading.Lock()

    def __call__(cls, *args: object, **kwargs: object) -> ModelRegistry:
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__call__(*args, **kwargs)
        return cls._instance


class ModelRegistry(metaclass=_ThreadSafeSingleton):
    """Centralised look-up and registration for model descriptors.

    Usage:

    ```python
    from chatwire.registry.model_registry import model_registry

    descriptor = model_registry.get('deepseek:deepseek-chat')
    ```
    """

    _registry: MutableMapping[str, ModelDescriptor]

    def __init__(self, models: Iterable[ModelDescriptor] = BUILTIN_MODELS) -> None:  # pragma: no cover - once
        self._registry = {}
        self._lock = threading.Lock()
        for descriptor in models:
            self.register(descriptor)

    def register(self, descriptor: ModelDescriptor) -> None:
        """Register *descriptor* under its qualified id, replacing any previous entry."""
        with self._lock:
            self._registry[descriptor.qualified_id.lower()] = descriptor

    def _snapshot(self) -> dict[str, ModelDescriptor]:
        with self._lock:
            return dict(self._registry)

    def lookup(self, model_id: str) -> ModelDescriptor | None:
        """Return the descriptor for *model_id* or ``None`` when unknown."""
        raw = model_id.strip()
        if ModelId.is_qualified(raw):
            try:
                parsed = ModelId.parse(raw)
            except ValueError:
                return None
            return self._registry.get(str(parsed))
        name = raw.lower()
        return next((d for d in self._snapshot().values() if d.id.lower() == name), None)

    def get(self, model_id: str) -> ModelDescriptor:
        """Return the descriptor for *model_id*.

        Raises
        ------
        ModelNotSupportedError
            If *model_id* hasn't been registered.

        """
        if (descriptor := self.lookup(model_id)) is None:
            raise ModelNotSupportedError(f'Model not supported: {model_id}')
        return descriptor

    def available_models(self) -> list[str]:
        """Return a sorted list of qualified model ids (for introspection)."""
        return sorted(self._snapshot())

    def mapping(self) -> Mapping[str, ModelDescriptor]:
        """Return a read-only copy of the registry mapping."""
        return self._snapshot()

    # ------------------------------------------------------------------
    # Catalog filters
    # ------------------------------------------------------------------

    def streaming_models(self) -> list[ModelDescriptor]:
        return [d for d in self._snapshot().values() if d.can_stream]

    def long_context_models(self, min_context: int = 32768) -> list[ModelDescriptor]:
        return [d for d in self._snapshot().values() if (d.context_length or 0) >= min_context]

    def models_with_capability(self, capability: str) -> list[ModelDescriptor]:
        return [d for d in self._snapshot().values() if capability in d.capabilities]

    def free_models(self) -> list[ModelDescriptor]:
        return [d for d in self._snapshot().values() if d.is_free_tier]


# Re-export a module-level instance for ergonomic usage
model_registry: ModelRegistry = ModelRegistry()
