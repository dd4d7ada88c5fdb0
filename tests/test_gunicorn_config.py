import importlib

import gunicorn_config


def test_uvicorn_worker_settings(monkeypatch):
    monkeypatch.setenv("GUNICORN_BIND", "0.0.0.0:9000")
    monkeypatch.setenv("GUNICORN_WORKERS", "3")
    cfg = importlib.reload(gunicorn_config)

    assert cfg.bind == "0.0.0.0:9000"
    assert cfg.workers == 3
    assert cfg.worker_class == "uvicorn.workers.UvicornWorker"
    # Settings without effect under uvicorn workers are not carried
    assert not hasattr(cfg, "worker_connections")
    assert not hasattr(cfg, "umask")

    monkeypatch.delenv("GUNICORN_BIND")
    monkeypatch.delenv("GUNICORN_WORKERS")
    importlib.reload(gunicorn_config)
