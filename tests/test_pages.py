import concurrent.futures
import logging

from fastapi.testclient import TestClient

from wordserver.dictionary import CachedWordData
from wordserver.main import _log_emit_failure, create_app, create_asgi_app


def test_index_renders(client, store):
    r = client.get("/")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert f"generation {store.current.generation}" in r.text


def test_unknown_path_is_404(client):
    assert client.get("/nothing-here").status_code == 404


def test_css_and_js(client):
    css = client.get("/css")
    assert css.headers["content-type"].startswith("text/css")
    assert "color: black" in css.text
    js = client.get("/js")
    assert js.headers["content-type"].startswith("application/javascript")


def test_static_files(client):
    r = client.get("/static/robots.txt")
    assert r.status_code == 200
    assert "User-agent" in r.text


def test_favicon(client, static_dir):
    assert client.get("/favicon.ico").status_code == 404
    (static_dir / "favicon.ico").write_bytes(b"\x00\x00\x01\x00")
    r = client.get("/favicon.ico")
    assert r.status_code == 200
    assert r.content == b"\x00\x00\x01\x00"


def test_reloaded_templates_are_served(client, store, template_dir):
    (template_dir / "index.html").write_text("<p>fresh</p>", encoding="utf-8")
    store.reload()
    assert client.get("/").text == "<p>fresh</p>"


def test_render_error_is_500_without_detail(client, store, template_dir):
    (template_dir / "index.html").write_text("{{ 1 / 0 }}", encoding="utf-8")
    store.reload()
    r = client.get("/")
    assert r.status_code == 500
    assert r.text == ""


def test_requests_are_access_logged(client, caplog):
    with caplog.at_level(logging.INFO, logger="wordserver.access"):
        client.get("/anagram", params={"input": "cat"})
    records = [r.getMessage() for r in caplog.records if r.name == "wordserver.access"]
    assert any("GET" in m and "/anagram?input=cat" in m for m in records)


def test_socketio_wrapper_passes_http_through(settings, store):
    app = create_app(settings, CachedWordData(settings.word_lists), store, watch_templates=False)
    with TestClient(create_asgi_app(app)) as c:
        r = c.get("/anagram", params={"input": "listen"})
    assert r.status_code == 200
    assert "silent" in r.json()["result"]


def test_lifespan_starts_and_stops_watcher(settings, store):
    app = create_app(settings, CachedWordData(settings.word_lists), store)
    with TestClient(app):
        watcher = app.state.watcher
        assert watcher is not None and watcher.active
    assert watcher.active is False


def test_failed_requests_are_access_logged(settings, store, caplog):
    app = create_app(settings, CachedWordData(settings.word_lists), store, watch_templates=False)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    with caplog.at_level(logging.INFO, logger="wordserver.access"):
        with TestClient(app, raise_server_exceptions=False) as c:
            assert c.get("/boom").status_code == 500
    records = [r.getMessage() for r in caplog.records if r.name == "wordserver.access"]
    assert any("/boom" in m and "\t500\t" in m for m in records)


def test_missing_static_dir_disables_mount(settings, store, tmp_path, caplog):
    settings.static_dir = str(tmp_path / "no-static")
    with caplog.at_level(logging.WARNING, logger="wordserver.main"):
        app = create_app(settings, CachedWordData(settings.word_lists), store, watch_templates=False)
    assert any("no-static" in r.getMessage() for r in caplog.records)
    with TestClient(app) as c:
        assert c.get("/static/robots.txt").status_code == 404


def test_failed_reload_broadcast_is_logged(caplog):
    future = concurrent.futures.Future()
    future.set_exception(RuntimeError("socket closed"))
    with caplog.at_level(logging.ERROR, logger="wordserver.main"):
        _log_emit_failure(future)
    assert any("socket closed" in r.getMessage() for r in caplog.records)


def test_successful_reload_broadcast_is_quiet(caplog):
    future = concurrent.futures.Future()
    future.set_result(None)
    with caplog.at_level(logging.ERROR, logger="wordserver.main"):
        _log_emit_failure(future)
    assert caplog.records == []
