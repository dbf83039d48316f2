"""
domain/models.py
──────────────────────────────────────────────────────────────────────────────
Pure domain objects: Pydantic models with no imports from adapters or ports.

These models are the lingua franca of the entire system:
  • configuration adapters produce GenerationConfig snapshots
  • the dispatcher consumes GenerationRequest + ProviderSelection
  • interfaces serialise GenerationResult

Every model here is request-scoped: nothing is persisted by the core.
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ── Enums ──────────────────────────────────────────────────────────────────────

class OperationId(str, Enum):
    """The fixed text-transformation tools."""
    REPHRASE  = "rephrase"
    IMPROVE   = "improve"
    TONE      = "tone"
    SUMMARIZE = "summarize"
    EXPAND    = "expand"


class ProviderId(str, Enum):
    """Backend identities a user can select."""
    GEMINI     = "gemini"      # native structured-output backend
    OPENAI     = "openai"      # chat-completions family
    GROQ       = "groq"        # chat-completions family
    OPENROUTER = "openrouter"  # chat-completions family
    RELAY      = "relay"       # user-operated worker in front of Gemini


class AdapterKind(str, Enum):
    """Closed set of wire shapes the dispatcher routes between."""
    NATIVE = "native"
    COMPAT = "compat"
    RELAY  = "relay"


COMPAT_PROVIDERS: frozenset[ProviderId] = frozenset(
    {ProviderId.OPENAI, ProviderId.GROQ, ProviderId.OPENROUTER}
)


# ── Input ──────────────────────────────────────────────────────────────────────

class TransformRequest(BaseModel):
    """Validated user input: which tool to run on which text."""

    operation_id: OperationId
    text: str = Field(..., min_length=1, description="Text to transform")
    tone: Optional[str] = Field(None, description="Target tone (tone tool only)")

    @field_validator("text")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("text must not be blank")
        return v


class GenerationRequest(BaseModel):
    """A fully rendered request, ready to be sent to any backend.

    ``system_instruction`` is resolved upstream (per-operation override, else
    the tool's default) and is treated as opaque text from here on.
    """

    operation_id: OperationId
    system_instruction: str
    user_prompt: str = Field(..., min_length=1)


class ProviderSelection(BaseModel):
    """Which backend to call and with what credential, for one call."""

    model_config = ConfigDict(frozen=True)

    provider_id:         ProviderId
    model_id:            str
    credential:          Optional[str] = None
    platform_credential: Optional[str] = None
    relay_url:           Optional[str] = None
    relay_enabled:       bool = False

    @property
    def native_credential(self) -> Optional[str]:
        """Per-provider key, falling back to the platform-level key."""
        return self.credential or self.platform_credential or None


class GenerationConfig(BaseModel):
    """Immutable snapshot returned by a ConfigurationPort.

    Read once at the start of a call; later edits to the underlying source
    never affect a call already in flight.
    """

    model_config = ConfigDict(frozen=True)

    provider_id:         ProviderId = ProviderId.GEMINI
    model_id:            str = "gemini-3-flash-preview"
    api_keys:            dict[ProviderId, str] = Field(default_factory=dict)
    platform_key:        str = ""
    relay_enabled:       bool = False
    relay_url:           str = ""
    custom_instructions: dict[OperationId, str] = Field(default_factory=dict)

    def select(self, provider_id: ProviderId | None = None) -> ProviderSelection:
        """Resolve the ProviderSelection for the active (or given) provider."""
        pid = provider_id or self.provider_id
        return ProviderSelection(
            provider_id=pid,
            model_id=self.model_id,
            credential=(self.api_keys.get(pid) or "").strip() or None,
            platform_credential=self.platform_key.strip() or None,
            relay_url=self.relay_url.strip() or None,
            relay_enabled=self.relay_enabled,
        )

    def instruction_for(self, operation_id: OperationId, default: str) -> str:
        """Per-operation override if one is set, otherwise ``default``."""
        override = self.custom_instructions.get(operation_id, "")
        return override if override.strip() else default

    def has_credential(self, provider_id: ProviderId) -> bool:
        """Whether a probe of ``provider_id`` has anything to test with.

        In relay mode the Gemini slot needs only the relay URL.
        """
        if provider_id == ProviderId.GEMINI:
            if self.relay_enabled and self.relay_url.strip():
                return True
            return bool(self.api_keys.get(provider_id, "").strip() or self.platform_key.strip())
        return bool(self.api_keys.get(provider_id, "").strip())


# ── Output ─────────────────────────────────────────────────────────────────────

class GenerationResult(BaseModel):
    """Ordered alternative outputs of one generation call.

    ``variants`` keeps the order the backend returned; it is never empty.
    """

    variants:     list[str] = Field(..., min_length=1)
    operation_id: OperationId
    provider_id:  ProviderId
    model_id:     str
    adapter:      AdapterKind
    generated_at: datetime = Field(
                      default_factory=lambda: datetime.now(timezone.utc)
                  )

    def __len__(self) -> int:
        return len(self.variants)

    def to_dict(self) -> dict:
        """Serialise to a plain JSON-safe dict."""
        return self.model_dump(mode="json")
