"""core.model_id

Utility for validating and parsing model identifiers of the canonical form

    "<provider>:<model_name>"

Bare model names (``deepseek-chat``) are accepted by the registry as well;
this module only deals with the qualified form.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator

# ---------------------------------------------------------------------------
# Regular-expression helpers
# ---------------------------------------------------------------------------

_MODEL_ID_REGEX: re.Pattern[str] = re.compile(
    r'^(?P<provider>[a-z0-9_-]+):(?P<model>[a-z0-9_.-]+)$',
    re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


class ModelId(BaseModel):
    """Value-object representing a qualified model identifier.

    * `provider` … provider slug (e.g. ``deepseek``, ``dashscope``)
    * `model` … concrete model name (e.g. ``deepseek-chat``)

    The *raw* string is preserved for logging/debugging purposes.
    """

    provider: str = Field(..., pattern=r'^[a-z0-9_-]+$', description='provider slug')
    model: str = Field(..., pattern=r'^[a-z0-9_.-]+$', description='model name')
    raw: str = Field(..., description='original, unmodified identifier')

    model_config = {
        'frozen': True,  # hashable / usable as dict key
        'str_strip_whitespace': True,
    }

    @field_validator('provider', 'model', mode='before')
    @classmethod
    def _to_lower(cls, v: str) -> str:
        """Force lower-case for case-insensitive matching."""
        return v.lower()

    @classmethod
    def parse(cls, raw: str) -> ModelId:
        """Parse and validate a *raw* identifier string.

        >>> ModelId.parse("deepseek:deepseek-chat")
        ModelId(provider='deepseek', model='deepseek-chat', raw='deepseek:deepseek-chat')
        """
        if (m := _MODEL_ID_REGEX.match(raw.strip())) is None:
            raise ValueError(f"Invalid ModelId format. Expected '<provider>:<model>', got: {raw}")
        return cls(provider=m.group('provider'), model=m.group('model'), raw=raw)

    @staticmethod
    def is_qualified(raw: str) -> bool:
        return ':' in raw

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f'{self.provider}:{self.model}'


# Convenience alias so callers don't need to import the class explicitly
parse_model_id = ModelId.parse
