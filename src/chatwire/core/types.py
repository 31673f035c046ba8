"""core.types

Shared DTOs and enums used throughout *chatwire*.

These models live in the **core** layer so that *wire*, *streaming*,
*structured* and the client can depend on them without causing circular
imports.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# ---------------------------------------------------------------------------
# Chat roles (OpenAI-style for broad compatibility)
# ---------------------------------------------------------------------------


class Role(StrEnum):
    system = 'system'
    user = 'user'
    assistant = 'assistant'


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class ChatMessage(BaseModel):
    """Single chat message. Order inside a conversation is significant."""

    role: Role
    content: str

    # Immutable value-object
    model_config = ConfigDict(frozen=True)

    @classmethod
    def system(cls, content: str) -> ChatMessage:
        return cls(role=Role.system, content=content)

    @classmethod
    def user(cls, content: str) -> ChatMessage:
        return cls(role=Role.user, content=content)

    @classmethod
    def assistant(cls, content: str) -> ChatMessage:
        return cls(role=Role.assistant, content=content)

    def to_wire(self) -> dict[str, str]:
        return {'role': self.role.value, 'content': self.content}


# ---------------------------------------------------------------------------
# Generation options (provider-agnostic)
#   • ``None`` means "use the provider default", never zero
# ---------------------------------------------------------------------------


class GenerationOptions(BaseModel):
    """Temperature, token limits, penalties, etc. for a single call."""

    temperature: float | None = Field(None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(None, ge=1, description='Maximum tokens in completion')
    top_p: float | None = Field(None, ge=0.0, le=1.0)
    frequency_penalty: float | None = Field(None, ge=-2.0, le=2.0)
    presence_penalty: float | None = Field(None, ge=-2.0, le=2.0)
    stop: tuple[str, ...] | None = Field(None, description='Stop strings, order preserved, duplicates dropped')
    stream: bool = False
    system_prompt: str | None = Field(None, description='Materialises as a leading system message')
    model_override: str | None = Field(None, description='Model id used instead of the client default')
    logprobs: bool | None = None
    top_logprobs: int | None = Field(None, ge=0, le=20)

    model_config = ConfigDict(frozen=True, extra='forbid', protected_namespaces=())

    @field_validator('stop', mode='before')
    @classmethod
    def _dedupe_stop(cls, v: object) -> object:
        if v is None:
            return v
        if isinstance(v, str):
            return (v,)
        return tuple(dict.fromkeys(v))  # type: ignore[call-overload]


# ---------------------------------------------------------------------------
# Streaming
# ---------------------------------------------------------------------------


class StreamEvent(BaseModel):
    """Unit pushed to a streaming consumer; ``is_final`` closes the stream."""

    delta_text: str = ''
    is_final: bool = False

    model_config = ConfigDict(frozen=True)

    @classmethod
    def final(cls) -> StreamEvent:
        return cls(delta_text='', is_final=True)


# ---------------------------------------------------------------------------
# Structured output
# ---------------------------------------------------------------------------


class OHLCVRecord(BaseModel):
    """Open/High/Low/Close/Volume candle."""

    open: float
    high: float
    low: float
    close: float
    volume: float

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='after')
    def _check_consistency(self) -> OHLCVRecord:
        if self.high < self.low:
            raise ValueError('high cannot be lower than low')
        if not self.low <= self.close <= self.high:
            raise ValueError('close must be between low and high')
        if self.volume < 0:
            raise ValueError('volume must be non-negative')
        return self


class AnalysisType(StrEnum):
    """Focus of an OHLCV analysis request."""

    trend = 'trend'
    volume = 'volume'
    technical = 'technical'
    comprehensive = 'comprehensive'


class OHLCVAnalysis(BaseModel):
    """Structured analysis reply: a summary plus observations and advice."""

    summary: str = Field(..., min_length=1)
    details: tuple[str, ...]
    recommendations: tuple[str, ...]

    model_config = ConfigDict(frozen=True)
