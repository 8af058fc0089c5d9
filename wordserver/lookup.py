from __future__ import annotations
import logging
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

from .dictionary import OPERATIONS, WordList, WordListError, multiplex, union
from .schemas import LookupResult

logger = logging.getLogger(__name__)

MAX_INPUT_LENGTH = 13
INVALID_INPUT = 'Invalid input'
UNABLE_TO_LOAD = 'Unable to load wordlist'

class WordDataProvider(Protocol):
    def word_lists(self) -> Sequence[WordList]: ...

def is_valid_input(text: Optional[str]) -> bool:
    return bool(text) and len(text) <= MAX_INPUT_LENGTH

def lookup(
    provider: WordDataProvider,
    operation: str,
    text: Optional[str],
    combine: Callable[[Sequence[List[str]]], List[str]] = union,
) -> Tuple[LookupResult, int]:
    """Validate ``text`` and run ``operation`` against every configured word list.

    Returns the response envelope and the HTTP status code. Validation always
    happens before the provider is touched.
    """
    if not is_valid_input(text):
        return LookupResult.failure(INVALID_INPUT), 400
    op = OPERATIONS[operation]
    try:
        handles = provider.word_lists()
        words = multiplex(handles, op, text, combine=combine)
    except WordListError:
        logger.exception("Unable to load words for %s lookup", operation)
        return LookupResult.failure(UNABLE_TO_LOAD), 500
    return LookupResult.of(words), 200
