import logging

from jerp.config import DEFAULT_DATA_DIR, DEFAULT_PASSWORD_ITERATIONS, load_config
from jerp.logging_config import setup_logging


def test_load_config_reads_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("JERP_DATA_DIR", str(tmp_path / "store"))
    monkeypatch.setenv("JERP_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("JERP_LOG_LEVEL", "debug")
    monkeypatch.setenv("JERP_PASSWORD_ITERATIONS", "5000")

    config = load_config()
    assert config.data_dir == tmp_path / "store"
    assert config.log_dir == tmp_path / "logs"
    assert config.log_level == "DEBUG"
    assert config.password_iterations == 5000


def test_load_config_defaults(monkeypatch):
    for name in ("JERP_DATA_DIR", "JERP_LOG_DIR", "JERP_LOG_LEVEL", "JERP_PASSWORD_ITERATIONS"):
        monkeypatch.delenv(name, raising=False)

    config = load_config()
    assert config.data_dir == DEFAULT_DATA_DIR
    assert config.log_level == "INFO"
    assert config.password_iterations == DEFAULT_PASSWORD_ITERATIONS


def test_bad_iteration_count_falls_back(monkeypatch):
    monkeypatch.setenv("JERP_PASSWORD_ITERATIONS", "many")
    assert load_config().password_iterations == DEFAULT_PASSWORD_ITERATIONS
    monkeypatch.setenv("JERP_PASSWORD_ITERATIONS", "0")
    assert load_config().password_iterations == 1


def test_setup_logging_installs_handlers_once(tmp_path, clean_root_logger):
    log_dir = tmp_path / "logs"

    setup_logging(log_dir, "DEBUG")
    setup_logging(log_dir, "DEBUG")

    ours = [handler for handler in clean_root_logger.handlers if getattr(handler, "_jerp_handler", False)]
    assert len(ours) == 2
    assert clean_root_logger.level == logging.DEBUG

    logging.getLogger("jerp.tests").info("hello from the ledger")
    for handler in ours:
        handler.flush()
    assert "hello from the ledger" in (log_dir / "jerp.log").read_text(encoding="utf-8")
