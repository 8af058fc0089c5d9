from __future__ import annotations
import logging
import os

from fastapi import APIRouter, Request, Response
from fastapi.responses import FileResponse, HTMLResponse

logger = logging.getLogger(__name__)

router = APIRouter()

def _render(request: Request, name: str, media_type: str) -> Response:
    # one snapshot per request; a concurrent reload can't change it under us
    template_set = request.app.state.templates.current
    try:
        body = template_set.render(name)
    except Exception:
        logger.exception("Unable to render %s (generation %d)", name, template_set.generation)
        return Response(status_code=500)
    return Response(body, media_type=media_type)

@router.get('/', response_class=HTMLResponse)
async def index(request: Request):
    return _render(request, 'index.html', 'text/html; charset=utf-8')

@router.get('/css')
async def css(request: Request):
    return _render(request, 'main.css', 'text/css; charset=utf-8')

@router.get('/js')
async def js(request: Request):
    return _render(request, 'main.js', 'application/javascript; charset=utf-8')

@router.get('/favicon.ico')
async def favicon(request: Request):
    path = os.path.join(request.app.state.settings.static_dir, 'favicon.ico')
    if not os.path.isfile(path):
        return Response(status_code=404)
    return FileResponse(path, media_type='image/x-icon')
