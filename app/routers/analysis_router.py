import os
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

from ..core.config import settings
from ..dependencies import get_current_user, get_analysis_service
from ..application.services.analysis_service import AnalysisService
from ..schemas import AnalysisResponse, ErrorResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analysis", tags=["Analysis"])

UNSUPPORTED_TYPE = "Only image files can be uploaded (PNG, JPG, JPEG, GIF, WebP)"


def _validate_image_upload(uploaded: UploadFile) -> str:
    """Check extension, content type and size; returns the normalized extension."""
    allowed = [ext.lower() for ext in settings.ALLOWED_IMAGE_EXTENSIONS]
    ext = os.path.splitext(uploaded.filename or "")[1].lower().lstrip(".")
    content_type = (uploaded.content_type or "").lower()

    if ext not in allowed:
        raise HTTPException(status_code=400, detail=UNSUPPORTED_TYPE)
    if not content_type.startswith("image/") or content_type.split("/", 1)[1] not in allowed:
        raise HTTPException(status_code=400, detail=UNSUPPORTED_TYPE)

    uploaded.file.seek(0, 2)
    file_size = uploaded.file.tell()
    uploaded.file.seek(0)
    if file_size > settings.MAX_FILE_SIZE:
        raise HTTPException(status_code=413, detail=f"File too large (max {settings.MAX_FILE_SIZE // (1024*1024)}MB)")
    return ext


@router.post(
    "",
    status_code=201,
    response_model=AnalysisResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}, 413: {"model": ErrorResponse}},
)
async def create_analysis(
    file: Optional[UploadFile] = File(None),
    user_intent: str = Form(..., alias="userIntent"),
    current_user: str = Depends(get_current_user),
    service: AnalysisService = Depends(get_analysis_service),
):
    """Upload a screenshot and start the AI analysis in the background.

    The record comes back in ``processing`` state; poll ``GET /analysis/{id}``
    until it is ``completed`` or ``failed``.
    """
    image_path = None
    if file is not None:
        ext = _validate_image_upload(file)
        content = await file.read()
        image_path = await run_in_threadpool(service.storage_repo.save_bytes, ext, content)

    record = await service.submit(current_user, image_path, user_intent)
    return AnalysisResponse.from_record(record)


@router.get("", response_model=List[AnalysisResponse])
def list_analyses(
    current_user: str = Depends(get_current_user),
    service: AnalysisService = Depends(get_analysis_service),
):
    return [AnalysisResponse.from_record(r) for r in service.list_for_owner(current_user)]


@router.get("/{analysis_id}", response_model=AnalysisResponse, responses={404: {"model": ErrorResponse}})
def get_analysis(
    analysis_id: str,
    current_user: str = Depends(get_current_user),
    service: AnalysisService = Depends(get_analysis_service),
):
    return AnalysisResponse.from_record(service.get(analysis_id, current_user))


@router.delete("/{analysis_id}", response_model=MessageResponse, responses={404: {"model": ErrorResponse}})
def delete_analysis(
    analysis_id: str,
    current_user: str = Depends(get_current_user),
    service: AnalysisService = Depends(get_analysis_service),
):
    service.delete(analysis_id, current_user)
    return MessageResponse(message="Analysis deleted")
