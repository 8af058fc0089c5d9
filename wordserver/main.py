from __future__ import annotations
import asyncio
import concurrent.futures
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Callable, Optional

import socketio
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .config import Settings
from .exif import extract_exif
from .lookup import WordDataProvider
from .managers.templates import TemplateSet, TemplateStore
from .managers.watcher import TemplateWatcher
from .routers import exif, lookup, pages
from .schemas import TemplateNotice

access_logger = logging.getLogger('wordserver.access')
logger = logging.getLogger(__name__)

def _notice(template_set: TemplateSet) -> dict:
    return TemplateNotice(generation=template_set.generation, loadedAt=template_set.loaded_at).model_dump()

def _log_emit_failure(future: concurrent.futures.Future) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error("Unable to broadcast template reload: %s", exc, exc_info=exc)

def create_app(
    settings: Settings,
    words: WordDataProvider,
    templates: TemplateStore,
    exif_extractor: Callable = extract_exif,
    watch_templates: bool = True,
) -> FastAPI:
    """Build the HTTP app around already-loaded word data and templates."""
    origins = '*' if '*' in settings.cors_origins else settings.cors_origins
    sio = socketio.AsyncServer(async_mode='asgi', cors_allowed_origins=origins)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        loop = asyncio.get_running_loop()

        def on_reload(template_set: TemplateSet) -> None:
            # called from the watcher thread
            future = asyncio.run_coroutine_threadsafe(sio.emit('templates:reloaded', _notice(template_set)), loop)
            future.add_done_callback(_log_emit_failure)

        watcher: Optional[TemplateWatcher] = None
        if watch_templates:
            watcher = TemplateWatcher(templates, on_reload=on_reload)
            watcher.start()
        app.state.watcher = watcher
        try:
            yield
        finally:
            if watcher is not None:
                watcher.stop()

    app = FastAPI(title="Word Lookup Server", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.words = words
    app.state.templates = templates
    app.state.exif = exif_extractor
    app.state.sio = sio
    app.state.watcher = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=['GET', 'POST'],
        allow_headers=['*'],
    )

    @app.middleware('http')
    async def log_requests(request: Request, call_next):
        started = time.monotonic()
        status = 500  # unless a response comes back
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            client = request.client
            uri = request.url.path + ('?' + request.url.query if request.url.query else '')
            access_logger.info(
                "%s\t\t%s\t\t%s\t%d\t%.1fms",
                f"{client.host}:{client.port}" if client else '-',
                request.method,
                uri,
                status,
                (time.monotonic() - started) * 1000,
            )

    app.include_router(pages.router)
    app.include_router(lookup.router)
    app.include_router(exif.router)
    if os.path.isdir(settings.static_dir):
        app.mount('/static', StaticFiles(directory=settings.static_dir), name='static')
    else:
        logger.warning("Static directory %s not found, /static is disabled", settings.static_dir)

    @sio.event
    async def connect(sid, environ, auth=None):
        await sio.emit('templates:current', _notice(templates.current), to=sid)

    @sio.on('ping')
    async def on_ping(sid):
        await sio.emit('pong', to=sid)

    return app

def create_asgi_app(app: FastAPI) -> socketio.ASGIApp:
    """Mount Socket.IO in front of the FastAPI app."""
    return socketio.ASGIApp(app.state.sio, other_asgi_app=app)
