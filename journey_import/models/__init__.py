"""
Models module for Journey Import

This module exports all Pydantic models for data validation and API contracts.
"""

from journey_import.models.conversations import (
    ExportConversationSummary,
    ExportImportResult,
    ImportedJourney,
    MessageRole,
    ParsedConversation,
    PastedConversationResult,
    Platform,
    RawMessage,
    Step,
    TextClassification,
    TextPlatform,
)

__all__ = [
    "ExportConversationSummary",
    "ExportImportResult",
    "ImportedJourney",
    "MessageRole",
    "ParsedConversation",
    "PastedConversationResult",
    "Platform",
    "RawMessage",
    "Step",
    "TextClassification",
    "TextPlatform",
]
