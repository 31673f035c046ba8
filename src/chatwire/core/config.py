"""core.config

Client configuration. Values are supplied by the caller at construction or
read from the process environment (optionally seeded from a ``.env`` file).
"""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from chatwire.core.exceptions import ConfigError

DEFAULT_MODEL = 'deepseek-chat'
DEFAULT_TIMEOUT_SEC = 60.0

#: Provider-specific fallbacks for the credential when CHATWIRE_API_KEY is unset.
PROVIDER_KEY_ENV: dict[str, str] = {
    'deepseek': 'DEEPSEEK_API_KEY',
    'dashscope': 'DASHSCOPE_API_KEY',
    'dashscope-native': 'DASHSCOPE_API_KEY',
}


class ClientConfig(BaseModel):
    """Connection settings for a `ChatClient`."""

    api_key: str = Field(..., repr=False, description='Bearer token sent to the provider')
    model: str = Field(DEFAULT_MODEL, description='Default model id, bare or provider-qualified')
    timeout: float = Field(DEFAULT_TIMEOUT_SEC, gt=0.0, description='Per-request timeout in seconds')
    base_url: str | None = Field(None, description='Replaces scheme and host of catalog endpoints')
    organization_id: str | None = None
    project_id: str | None = None

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    @classmethod
    def from_env(cls, model: str | None = None, *, provider: str | None = None) -> ClientConfig:
        """Build a config from ``CHATWIRE_*`` variables.

        The credential falls back to the provider's own variable
        (``DEEPSEEK_API_KEY``, ``DASHSCOPE_API_KEY``). A missing credential
        yields an empty ``api_key``; the client rejects it at construction.

        Raises
        ------
        ConfigError
            ``CHATWIRE_TIMEOUT`` is not a positive number.

        """
        load_dotenv()
        model = model or os.getenv('CHATWIRE_MODEL') or DEFAULT_MODEL
        if provider is None and ':' in model:
            provider = model.split(':', 1)[0].lower()

        api_key = os.getenv('CHATWIRE_API_KEY', '')
        if not api_key and provider in PROVIDER_KEY_ENV:
            api_key = os.getenv(PROVIDER_KEY_ENV[provider], '')

        raw_timeout = os.getenv('CHATWIRE_TIMEOUT')
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_SEC
        except ValueError as exc:
            raise ConfigError(f'Invalid CHATWIRE_TIMEOUT: {raw_timeout!r}') from exc

        try:
            config = cls(
                api_key=api_key,
                model=model,
                timeout=timeout,
                base_url=os.getenv('CHATWIRE_BASE_URL') or None,
                organization_id=os.getenv('CHATWIRE_ORGANIZATION_ID') or None,
                project_id=os.getenv('CHATWIRE_PROJECT_ID') or None,
            )
        except ValidationError as exc:
            raise ConfigError(f'Invalid client configuration from environment: {exc}') from exc
        return config
