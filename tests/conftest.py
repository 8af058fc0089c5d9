from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from wordserver.config import Settings
from wordserver.dictionary import CachedWordData
from wordserver.main import create_app
from wordserver.managers.templates import TemplateStore

WORDS = ["listen", "silent", "enlist", "tinsel", "inlets", "google", "cat", "act", "tac", "cot", "cut"]

TEMPLATES = {
    "index.html": "<h1>Lookup</h1><p>generation {{ generation }}</p>",
    "main.css": "body { color: black; }",
    "main.js": "console.log('v1');",
}


def _write(p: Path, lines):
    p.write_text("\n".join(lines) + "\n", encoding="utf-8")


@pytest.fixture
def word_file(tmp_path: Path) -> Path:
    p = tmp_path / "wordlist.txt"
    _write(p, WORDS)
    return p


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    d = tmp_path / "templates"
    d.mkdir()
    for name, source in TEMPLATES.items():
        (d / name).write_text(source, encoding="utf-8")
    return d


@pytest.fixture
def static_dir(tmp_path: Path) -> Path:
    d = tmp_path / "static"
    d.mkdir()
    (d / "robots.txt").write_text("User-agent: *\n", encoding="utf-8")
    return d


@pytest.fixture
def settings(word_file, template_dir, static_dir) -> Settings:
    return Settings(
        word_lists=[str(word_file)],
        template_dir=str(template_dir),
        static_dir=str(static_dir),
    )


@pytest.fixture
def store(template_dir) -> TemplateStore:
    s = TemplateStore(str(template_dir))
    s.load()
    return s


@pytest.fixture
def client(settings, store):
    app = create_app(settings, CachedWordData(settings.word_lists), store, watch_templates=False)
    with TestClient(app) as c:
        yield c
