"""
Journey Import.

Extracts AI chatbot conversations from share links, export files and pasted
text, and normalizes them into prompt/response steps.
"""

from journey_import.services.import_service import (
    extract_from_export_file,
    extract_from_pasted_text,
    extract_from_url,
    import_from_url,
)

__all__ = [
    "extract_from_export_file",
    "extract_from_pasted_text",
    "extract_from_url",
    "import_from_url",
]
