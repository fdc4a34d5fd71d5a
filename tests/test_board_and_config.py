from domain.constants import BOARD_ALL
from services.board import THREADS, filter_threads
from utils.config import load_config


def test_all_category_lists_pinned_first():
    threads = filter_threads(BOARD_ALL)
    assert len(threads) == len(THREADS)
    pinned = [t.pinned for t in threads]
    assert pinned == sorted(pinned, reverse=True)


def test_category_filter():
    assert {t.category for t in filter_threads("Tips")} == {"Tips"}
    assert filter_threads("Nothing here") == []


def test_config_defaults_to_local_backend(monkeypatch):
    for name in ("SUPABASE_URL", "SUPABASE_KEY", "TIMEZONE", "HTTP_TIMEOUT"):
        monkeypatch.delenv(f"ART_APP_{name}", raising=False)
    cfg = load_config()
    assert not cfg.use_supabase
    assert cfg.timezone == "UTC"
    assert cfg.http_timeout == 10.0


def test_config_reads_environment(monkeypatch):
    monkeypatch.setenv("ART_APP_SUPABASE_URL", "https://proj.supabase.co")
    monkeypatch.setenv("ART_APP_SUPABASE_KEY", "anon")
    monkeypatch.setenv("ART_APP_TIMEZONE", "Asia/Tokyo")
    monkeypatch.setenv("ART_APP_HTTP_TIMEOUT", "not-a-number")
    cfg = load_config()
    assert cfg.use_supabase
    assert str(cfg.tz) == "Asia/Tokyo"
    assert cfg.http_timeout == 10.0


def test_unknown_timezone_falls_back_to_utc(monkeypatch):
    monkeypatch.setenv("ART_APP_TIMEZONE", "Mars/Olympus")
    assert str(load_config().tz) == "UTC"
