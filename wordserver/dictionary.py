from __future__ import annotations
from collections import Counter, defaultdict
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set

# In-process word data provider. Each WordList is read-only once loaded;
# providers hand out one or more lists per lookup.

BLANK = '?'
WILDCARDS = {'?', '.'}


class WordListError(Exception):
    """Raised when a word list cannot be loaded or queried."""


def _signature(word: str) -> str:
    return ''.join(sorted(word))


class WordList:
    def __init__(self, words: Iterable[str], source: Optional[str] = None):
        self.source = source
        self._words: Set[str] = {w.lower() for w in words if w}
        # sorted letters -> words, and length -> words
        self._by_signature: Dict[str, List[str]] = defaultdict(list)
        self._by_length: Dict[int, List[str]] = defaultdict(list)
        for w in sorted(self._words):
            self._by_signature[_signature(w)].append(w)
            self._by_length[len(w)].append(w)

    def __len__(self) -> int:
        return len(self._words)

    def __contains__(self, word: str) -> bool:
        return word.lower() in self._words

    def anagrams(self, text: str) -> List[str]:
        text = text.lower()
        blanks = text.count(BLANK)
        if not blanks:
            return list(self._by_signature.get(_signature(text), []))
        # same length, so any leftover letters are covered by the blanks
        letters = Counter(text.replace(BLANK, ''))
        return [w for w in self._by_length.get(len(text), []) if not letters - Counter(w)]

    def match(self, text: str) -> List[str]:
        text = text.lower()
        out = []
        for w in self._by_length.get(len(text), []):
            if all(p in WILDCARDS or p == c for p, c in zip(text, w)):
                out.append(w)
        return out


def load_words(path: str) -> WordList:
    try:
        with open(path, 'r', encoding='utf-8') as fh:
            words = [
                line.strip()
                for line in fh
                if line.strip() and not line.lstrip().startswith('#')
            ]
    except (OSError, UnicodeDecodeError) as e:
        raise WordListError(f"unable to load word list {path}: {e}") from e
    return WordList(words, source=path)


Operation = Callable[[WordList, str], List[str]]

OPERATIONS: Dict[str, Operation] = {
    'anagram': WordList.anagrams,
    'match': WordList.match,
}


def union(results: Sequence[List[str]]) -> List[str]:
    """Order-preserving union of per-list results."""
    seen: Set[str] = set()
    merged: List[str] = []
    for words in results:
        for w in words:
            if w not in seen:
                seen.add(w)
                merged.append(w)
    return merged


def multiplex(
    handles: Sequence[WordList],
    operation: Operation,
    text: str,
    combine: Callable[[Sequence[List[str]]], List[str]] = union,
) -> List[str]:
    return combine([operation(h, text) for h in handles])


class CachedWordData:
    """Loads every list once, at construction, and shares them process-wide."""

    def __init__(self, paths: Sequence[str]):
        if not paths:
            raise WordListError("no word lists configured")
        self.paths = list(paths)
        self._lists = tuple(load_words(p) for p in self.paths)

    def word_lists(self) -> Sequence[WordList]:
        return self._lists


class ReloadingWordData:
    """Loads every list afresh on each call; nothing is shared between calls."""

    def __init__(self, paths: Sequence[str]):
        if not paths:
            raise WordListError("no word lists configured")
        self.paths = list(paths)

    def word_lists(self) -> Sequence[WordList]:
        return [load_words(p) for p in self.paths]
