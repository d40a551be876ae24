"""
Conversation-related Pydantic models.

This module contains the normalized shapes produced by the extraction engine:
role-tagged messages, parsed conversations, and the prompt/response steps
handed back to the hosting application.
"""

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

Platform = Literal["chatgpt", "claude", "gemini", "unknown"]
TextPlatform = Literal["chatgpt", "claude", "copilot", "gemini", "generic"]
MessageRole = Literal["user", "assistant", "system"]


class RawMessage(BaseModel):
    """Represents a single message in a conversation."""

    model_config = ConfigDict(frozen=True)

    role: MessageRole = Field(..., description="Message role: 'user' or 'assistant'")
    content: str = Field(..., description="Plain-text message content")


class ParsedConversation(BaseModel):
    """Represents a conversation decoded from a share page or export file."""

    model_config = ConfigDict(frozen=True)

    title: str = Field("", description="Best-effort conversation title")
    messages: List[RawMessage] = Field(
        default_factory=list, description="Messages in conversational order"
    )
    platform: Platform = Field("unknown", description="Platform the conversation came from")


class Step(BaseModel):
    """One user prompt paired with the assistant response that followed it."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Identifier unique within one build")
    title: str = Field(..., description="Synthesized short label")
    prompt: str = Field(..., description="User message content")
    result: str = Field("", description="Following assistant message content, if any")
    notes: str = Field("", description="Editable notes, always empty on creation")


class TextClassification(BaseModel):
    """Platform guess for pasted text."""

    model_config = ConfigDict(frozen=True)

    platform: TextPlatform = Field(..., description="Most likely source platform")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Certainty of the guess")


class ImportedJourney(BaseModel):
    """Steps built from a shared conversation link."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    platform: Platform
    steps: List[Step]
    source: str = Field("", description="Import source tag, e.g. 'chatgpt-share-url'")
    confidence: float = Field(0.9, ge=0.0, le=1.0)


class PastedConversationResult(BaseModel):
    """Steps built from raw pasted conversation text."""

    model_config = ConfigDict(frozen=True)

    platform: TextPlatform
    confidence: float = Field(..., ge=0.0, le=1.0)
    title: str
    description: str
    steps: List[Step]


class ExportConversationSummary(BaseModel):
    """Short listing entry for one conversation found in an export file."""

    model_config = ConfigDict(frozen=True)

    title: str
    message_count: int


class ExportImportResult(BaseModel):
    """Steps built from the first conversation of an export file."""

    model_config = ConfigDict(frozen=True)

    title: str
    steps: List[Step]
    conversations: List[ExportConversationSummary] = Field(default_factory=list)
    source: str = Field("", description="'chatgpt-json' or 'chatgpt-html'")
