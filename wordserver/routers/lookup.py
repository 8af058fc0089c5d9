from __future__ import annotations
import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException

from ..lookup import lookup

logger = logging.getLogger(__name__)

router = APIRouter()

FORM_TYPES = ('application/x-www-form-urlencoded', 'multipart/form-data')

async def form_value(request: Request, name: str) -> Optional[str]:
    # Body fields take precedence over the query string, like a classic form post.
    content_type = request.headers.get('content-type', '')
    if request.method == 'POST' and content_type.startswith(FORM_TYPES):
        try:
            form = await request.form()
        except HTTPException as e:
            # unreadable body; the query string is all we have
            logger.warning("Unable to parse %s form body: %s", request.url.path, e.detail)
        else:
            value = form.get(name)
            if isinstance(value, str):
                return value
    return request.query_params.get(name)

async def _respond(request: Request, operation: str) -> JSONResponse:
    text = await form_value(request, 'input')
    result, status = await run_in_threadpool(lookup, request.app.state.words, operation, text)
    return JSONResponse(result.model_dump(), status_code=status)

@router.api_route('/anagram', methods=['GET', 'POST'])
async def anagram(request: Request):
    return await _respond(request, 'anagram')

@router.api_route('/match', methods=['GET', 'POST'])
async def match(request: Request):
    return await _respond(request, 'match')
