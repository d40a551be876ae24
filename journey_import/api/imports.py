"""
Conversation import API.

Implements:
- POST /api/import/url      {url}  -> ImportedJourney
- POST /api/import/paste    {text} -> PastedConversationResult
- POST /api/import/chatgpt  multipart `file` -> ExportImportResult

Input size limits are enforced here; the extraction engine itself never
rejects input for being large.
"""

import logging
from typing import Optional, Union

from fastapi import APIRouter, File, Response, UploadFile
from pydantic import BaseModel, Field

from journey_import.config import settings
from journey_import.models import ExportImportResult, ImportedJourney, PastedConversationResult
from journey_import.services import import_service
from journey_import.services.scraper.errors import ExtractionError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/import")


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str = Field(..., description="User-facing error message")
    code: Optional[str] = Field(None, description="Failure kind, e.g. 'access_blocked'")


class UrlImportRequest(BaseModel):
    url: str = Field(..., description="Share link to import")


class PasteImportRequest(BaseModel):
    text: str = Field(..., description="Pasted conversation text")


def _extraction_error(response: Response, error: ExtractionError) -> ErrorResponse:
    response.status_code = 400
    return ErrorResponse(error=error.message, code=error.kind)


@router.post("/url")
async def import_url(
    request_data: UrlImportRequest, response: Response
) -> Union[ImportedJourney, ErrorResponse]:
    """Import a ChatGPT, Claude or Gemini share link."""
    try:
        return await import_service.import_from_url(request_data.url)
    except ExtractionError as e:
        logger.info(f"URL import rejected ({e.kind}): {request_data.url}")
        return _extraction_error(response, e)
    except Exception:
        logger.exception(f"URL import failed: {request_data.url}")
        response.status_code = 500
        return ErrorResponse(
            error="Failed to parse the shared conversation. Please try the copy-paste method instead."
        )


@router.post("/paste")
async def import_paste(
    request_data: PasteImportRequest, response: Response
) -> Union[PastedConversationResult, ErrorResponse]:
    """Structure pasted conversation text."""
    if len(request_data.text) > settings.MAX_PASTE_CHARS:
        response.status_code = 400
        return ErrorResponse(error="Text too long. Maximum 500KB allowed.", code="invalid_input")

    try:
        return import_service.extract_from_pasted_text(request_data.text)
    except ExtractionError as e:
        return _extraction_error(response, e)
    except Exception:
        logger.exception("Paste import failed")
        response.status_code = 500
        return ErrorResponse(error="Failed to parse conversation")


@router.post("/chatgpt")
async def import_chatgpt_export(
    response: Response, file: UploadFile = File(...)
) -> Union[ExportImportResult, ErrorResponse]:
    """Import a ChatGPT data export file (conversations.json or chat.html)."""
    if not file.filename:
        response.status_code = 400
        return ErrorResponse(error="No file uploaded", code="invalid_input")

    file_content = await file.read()
    if len(file_content) > settings.MAX_EXPORT_FILE_BYTES:
        response.status_code = 400
        return ErrorResponse(error="File too large. Maximum 10MB allowed.", code="invalid_input")

    try:
        return import_service.extract_from_export_file(
            filename=file.filename,
            content=file_content.decode("utf-8", errors="replace"),
        )
    except ExtractionError as e:
        return _extraction_error(response, e)
    except Exception:
        logger.exception(f"Export import failed: {file.filename}")
        response.status_code = 500
        return ErrorResponse(error="Failed to parse the file")
