from __future__ import annotations
import logging

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

def setup_logging(level: str = 'INFO') -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    # requests are logged by the access middleware
    logging.getLogger('uvicorn.access').disabled = True
