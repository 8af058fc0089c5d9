from __future__ import annotations
import asyncio
import logging
import sys
from typing import Optional, Sequence

import uvicorn

from .config import Settings, parse_settings
from .dictionary import CachedWordData, ReloadingWordData, WordListError
from .download import DownloadError, download_word_list
from .logging_config import setup_logging
from .lookup import WordDataProvider
from .main import create_app, create_asgi_app
from .managers.lifecycle import LifecycleController, Server, ShutdownTimeout
from .managers.templates import TemplateLoadError, TemplateStore

logger = logging.getLogger('wordserver')

def load_word_data(settings: Settings) -> WordDataProvider:
    if settings.reload_words:
        return ReloadingWordData(settings.word_lists)
    return CachedWordData(settings.word_lists)

def serve(settings: Settings) -> int:
    try:
        words = load_word_data(settings)
    except WordListError as e:
        logger.critical("Unable to load word lists: %s", e)
        return 1
    templates = TemplateStore(settings.template_dir)
    try:
        templates.load()
    except TemplateLoadError as e:
        logger.critical("Unable to parse templates: %s", e)
        return 1

    app = create_app(settings, words, templates)
    config = uvicorn.Config(
        create_asgi_app(app),
        host=settings.host,
        port=settings.port,
        access_log=False,
        log_config=None,
    )
    controller = LifecycleController(Server(config), shutdown_timeout=settings.shutdown_timeout)
    logger.info("Starting server on %s:%d", settings.host, settings.port)
    try:
        asyncio.run(controller.run())
    except ShutdownTimeout as e:
        logger.critical("Unable to shutdown: %s", e)
        return 1
    logger.info("Finishing server.")
    return 0

def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = parse_settings(argv)
    setup_logging(settings.log_level)
    if settings.download:
        try:
            download_word_list(settings.word_list_url, settings.word_lists[0])
        except DownloadError as e:
            logger.critical("%s", e)
            return 1
        return 0
    return serve(settings)

if __name__ == '__main__':
    sys.exit(main())
