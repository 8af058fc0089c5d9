from __future__ import annotations
import logging
import os
import tempfile
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

class DownloadError(Exception):
    pass

def download_word_list(url: str, destination: str, timeout: float = 60.0, client: Optional[httpx.Client] = None) -> int:
    """Fetch ``url`` into ``destination``; returns the number of bytes written.

    The file is written beside the destination and renamed into place, so a
    failed download never leaves a truncated word list behind.
    """
    if not url:
        raise DownloadError("no word list URL configured")
    directory = os.path.dirname(os.path.abspath(destination))
    os.makedirs(directory, exist_ok=True)
    owns_client = client is None
    client = client or httpx.Client(timeout=timeout, follow_redirects=True)
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.wordlist-')
    written = 0
    try:
        with os.fdopen(fd, 'wb') as out, client.stream('GET', url) as response:
            response.raise_for_status()
            for chunk in response.iter_bytes():
                out.write(chunk)
                written += len(chunk)
        os.replace(tmp_path, destination)
    except (httpx.HTTPError, OSError) as e:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise DownloadError(f"unable to download {url}: {e}") from e
    finally:
        if owns_client:
            client.close()
    logger.info("Downloaded %d bytes from %s to %s", written, url, destination)
    return written
