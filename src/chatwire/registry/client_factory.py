"""registry.client_factory

Factory responsible for converting a model id into a fully initialised
`ChatClient`, reading credentials from the environment when none are given.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from chatwire.client.chat_client import ChatClient
from chatwire.core.config import ClientConfig
from chatwire.registry.model_registry import model_registry

if TYPE_CHECKING:
    from chatwire.core.model_id import ModelId


class ChatClientFactory:
    """Factory for creating clients bound to a default model.

    This class is stateless; model information resides in model_registry.
    """

    @staticmethod
    def initialize_client(
        model_id: str | ModelId,
        *,
        api_key: str | None = None,
        **client_kwargs: Any,
    ) -> ChatClient:
        """Return a client whose default model is *model_id*.

        Parameters
        ----------
        model_id
            Bare (``"deepseek-chat"``) or qualified (``"deepseek:deepseek-chat"``)
            identifier, or a pre-parsed ModelId instance.
        api_key
            Credential; read from the environment (`ClientConfig.from_env`) when omitted.
        **client_kwargs
            Forwarded to `ChatClient` (``retry_strategy``, ``http_client``, ...).

        Raises
        ------
        ModelNotSupportedError
            Unknown model id.
        ConfigError
            No credential given or found in the environment.

        """
        descriptor = model_registry.get(str(model_id))
        config = ClientConfig.from_env(descriptor.qualified_id, provider=descriptor.provider)
        if api_key is not None:
            config = config.model_copy(update={'api_key': api_key})
        return ChatClient(config, **client_kwargs)
