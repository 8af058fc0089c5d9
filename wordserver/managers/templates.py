from __future__ import annotations
import logging
import os
import threading
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence

from jinja2 import DictLoader, Environment, Template, TemplateError, select_autoescape

logger = logging.getLogger(__name__)

TEMPLATE_FILES = ('main.css', 'index.html', 'main.js')

class TemplateLoadError(Exception):
    """The template directory could not be read or parsed as a whole."""

@dataclass(frozen=True)
class TemplateSet:
    generation: int
    directory: str
    loaded_at: float
    templates: Mapping[str, Template] = field(repr=False)

    def render(self, name: str, **context: Any) -> str:
        return self.templates[name].render(generation=self.generation, **context)

def parse_templates(directory: str, generation: int, files: Sequence[str] = TEMPLATE_FILES) -> TemplateSet:
    # Sources are read up front so the set never goes back to disk after this.
    sources = {}
    for name in files:
        path = os.path.join(directory, name)
        try:
            with open(path, 'r', encoding='utf-8') as fh:
                sources[name] = fh.read()
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateLoadError(f"unable to read {path}: {e}") from e
    env = Environment(
        loader=DictLoader(sources),
        autoescape=select_autoescape(['html']),
    )
    try:
        templates = {name: env.get_template(name) for name in files}
    except TemplateError as e:
        raise TemplateLoadError(f"unable to parse templates in {directory}: {e}") from e
    return TemplateSet(
        generation=generation,
        directory=directory,
        loaded_at=time.time(),
        templates=MappingProxyType(templates),
    )

class TemplateStore:
    """Holds the active TemplateSet.

    Readers take ``store.current`` once per request and render from that
    snapshot. Writers build a complete new set and publish it with a single
    reference assignment; a set that fails to parse is never published.
    """

    def __init__(self, directory: str, files: Sequence[str] = TEMPLATE_FILES):
        self.directory = directory
        self.files = tuple(files)
        self._current: Optional[TemplateSet] = None
        self._generation = 0
        self._write_lock = threading.Lock()

    @property
    def current(self) -> TemplateSet:
        current = self._current
        if current is None:
            raise RuntimeError("templates have not been loaded")
        return current

    def load(self) -> TemplateSet:
        """Parse and publish a new set, raising TemplateLoadError on failure."""
        with self._write_lock:
            template_set = parse_templates(self.directory, self._generation + 1, self.files)
            self._generation = template_set.generation
            self._current = template_set
        logger.info("Loaded templates from %s (generation %d)", self.directory, template_set.generation)
        return template_set

    def reload(self) -> Optional[TemplateSet]:
        """Like load(), but keeps the last good set when parsing fails."""
        try:
            return self.load()
        except TemplateLoadError as e:
            generation = self._current.generation if self._current else None
            logger.error("Template reload failed, keeping generation %s: %s", generation, e)
            return None
