"""
config/prompts.py
──────────────────────────────────────────────────────────────────────────────
All LLM prompt strings in one place: the fixed tool catalog plus the
suffixes each wire protocol appends.  Users override a tool's instruction
through configuration, never here.

To add a tool: add an OperationId member and a ToolDefinition below.
"""
from __future__ import annotations

from dataclasses import dataclass

from textforge.domain.exceptions import ConfigurationError
from textforge.domain.models import OperationId, ProviderId


@dataclass(frozen=True)
class ToolDefinition:
    """One text-transformation tool: default instruction + prompt template."""

    name: str
    description: str
    system_prompt: str
    user_template: str  # placeholders: {text}, and {tone} for the tone tool

    def render(self, text: str, tone: str | None = None) -> str:
        return self.user_template.format(text=text, tone=tone or DEFAULT_TONE)


# ── Tool catalog ───────────────────────────────────────────────────────────────
TOOLS: dict[OperationId, ToolDefinition] = {
    OperationId.REPHRASE: ToolDefinition(
        name="Word Rephraser",
        description="Rewrite your content while keeping the original meaning.",
        system_prompt=(
            "You are an expert editor. Provide 3 distinct variations of the input "
            "text by rephrasing it for clarity and engagement while preserving the "
            "original intent. Return a JSON array of strings."
        ),
        user_template="Rephrase this text in 3 different ways:\n\n{text}",
    ),
    OperationId.IMPROVE: ToolDefinition(
        name="Word Improver",
        description="Enhance vocabulary, flow, and structural impact.",
        system_prompt=(
            "You are a professional writing coach. Provide 3 distinct improved "
            "versions of the following text. Each version should progressively "
            "enhance vocabulary, fixing awkward phrasing and ensuring better flow. "
            "Return a JSON array of strings."
        ),
        user_template="Improve this text in 3 different ways:\n\n{text}",
    ),
    OperationId.TONE: ToolDefinition(
        name="Tone Changer",
        description="Shift your writing to a specific emotional or professional tone.",
        system_prompt=(
            "You are a communications specialist. Rewrite the input text to match "
            "the requested tone perfectly. Provide 3 distinct variations that embody "
            "that tone. Return a JSON array of strings."
        ),
        user_template="Rewrite this text in a {tone} tone (3 variations):\n\n{text}",
    ),
    OperationId.SUMMARIZE: ToolDefinition(
        name="Summarizer",
        description="Condense long text into concise, actionable points.",
        system_prompt=(
            "You are an efficient assistant. Provide 3 different summary formats: "
            "1) A one-sentence summary, 2) A short paragraph, 3) A bulleted list of "
            "key takeaways. Return a JSON array of strings."
        ),
        user_template="Summarize this text in 3 different formats:\n\n{text}",
    ),
    OperationId.EXPAND: ToolDefinition(
        name="Expander",
        description="Elaborate on short ideas with more detail and depth.",
        system_prompt=(
            "You are a creative writer. Provide 3 distinct expansions of the provided "
            "idea. One focusing on detail, one on context, and one on descriptive "
            "storytelling. Return a JSON array of strings."
        ),
        user_template="Expand on this text in 3 different ways:\n\n{text}",
    ),
}

TONES: tuple[str, ...] = ("Professional", "Casual", "Friendly", "Creative", "Direct")
DEFAULT_TONE = "Professional"

# ── Known models (id → provider) ───────────────────────────────────────────────
AVAILABLE_MODELS: dict[str, ProviderId] = {
    "gemini-3-flash-preview": ProviderId.GEMINI,
    "gemini-3-pro-preview": ProviderId.GEMINI,
    "gpt-4o": ProviderId.OPENAI,
    "gpt-4o-mini": ProviderId.OPENAI,
    "llama-3.3-70b-versatile": ProviderId.GROQ,
    "openai/gpt-4o-mini": ProviderId.OPENROUTER,
}

# ── Protocol-specific suffixes ─────────────────────────────────────────────────
# Chat-completions backends have no schema constraint, so ask in the prompt.
COMPAT_JSON_SUFFIX = " Respond only with a JSON array of strings."

RELAY_PROMPT_TEMPLATE = """\
[SYSTEM INSTRUCTION]
{instruction}

[USER INPUT]
{prompt}

IMPORTANT: Respond ONLY with a valid JSON array of strings. No markdown formatting.\
"""

PROBE_PROMPT = "ping"


def get_tool(operation_id: OperationId | str) -> ToolDefinition:
    """Look up a tool by id.

    Raises:
        ConfigurationError: If the id names no tool.
    """
    try:
        return TOOLS[OperationId(operation_id)]
    except ValueError as exc:
        valid = ", ".join(op.value for op in OperationId)
        raise ConfigurationError(
            f"Unknown tool '{operation_id}'. Valid values: {valid}."
        ) from exc


def render_user_prompt(
    operation_id: OperationId | str,
    text: str,
    tone: str | None = None,
) -> str:
    """Render the user-facing prompt for a tool.

    Only the tone tool uses ``tone``; it defaults to DEFAULT_TONE.
    """
    return get_tool(operation_id).render(text, tone)


def build_compat_system_message(instruction: str) -> str:
    """System message for chat-completions backends."""
    return instruction + COMPAT_JSON_SUFFIX


def build_relay_prompt(instruction: str, prompt: str) -> str:
    """Combine instruction and prompt into the single string a relay expects."""
    return RELAY_PROMPT_TEMPLATE.format(instruction=instruction, prompt=prompt)
