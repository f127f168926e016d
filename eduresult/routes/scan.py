"""
Scan API routes
AI-assisted entry from a photographed answer sheet
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from eduresult.config import settings
from eduresult.core import BadRequestException, Messages
from eduresult.grader import normalize
from eduresult.modules.sheet_extraction import ExtractionClient
from eduresult.routes.deps import get_extraction_client, require_admin
from eduresult.schemas import ScanResponse
from eduresult.utils import is_valid_image

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


@router.post("", response_model=ScanResponse)
async def scan_answer_sheet(
    file: UploadFile = File(..., description="JPEG photo of the answer sheet"),
    exam_name: Optional[str] = Form(default=None, description="Current exam folder"),
    client: ExtractionClient = Depends(get_extraction_client)
):
    """
    Extract a candidate record from an answer sheet photo.

    The candidate is returned for review and is not stored. Extraction
    failures surface as 502 and leave stored records untouched.
    """
    if file.filename and not is_valid_image(file.filename):
        raise BadRequestException(Messages.INVALID_IMAGE)

    content = await file.read()
    if not content:
        raise BadRequestException(Messages.EMPTY_IMAGE)
    if len(content) > settings.MAX_IMAGE_SIZE:
        raise BadRequestException(Messages.IMAGE_TOO_LARGE)

    partial = await client.extract(content, fixed_exam_name=exam_name)
    candidate = normalize(partial)

    return ScanResponse(message=Messages.SCAN_COMPLETE, candidate=candidate)
