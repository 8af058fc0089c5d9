from __future__ import annotations
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException

from ..schemas import ExifResult

logger = logging.getLogger(__name__)

router = APIRouter()

UPLOAD_FIELD = 'exifFile'
UPLOAD_ERROR = 'Unable to read upload'

def _upload_error() -> JSONResponse:
    return JSONResponse(ExifResult(success=False, result=UPLOAD_ERROR).model_dump(), status_code=500)

@router.post('/exifUpload')
async def exif_upload(request: Request):
    try:
        form = await request.form()
    except HTTPException:
        logger.exception("Unable to parse upload form")
        return _upload_error()
    upload = form.get(UPLOAD_FIELD)
    if not isinstance(upload, UploadFile):
        logger.error("Upload is missing the %s file field", UPLOAD_FIELD)
        return _upload_error()
    try:
        data = await upload.read()
        status, body = await run_in_threadpool(request.app.state.exif, data)
    except OSError:
        logger.exception("Unable to read uploaded file %s", upload.filename)
        return _upload_error()
    finally:
        await upload.close()
    return JSONResponse(body, status_code=status)
