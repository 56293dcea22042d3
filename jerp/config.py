import os
from dataclasses import dataclass
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_DATA_DIR = PROJECT_ROOT / "data"
DEFAULT_LOG_DIR = PROJECT_ROOT / "logs"
DEFAULT_PASSWORD_ITERATIONS = 200_000


@dataclass(frozen=True)
class AppConfig:
    data_dir: Path
    log_dir: Path
    log_level: str
    password_iterations: int


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def load_config() -> AppConfig:
    """Reads settings from the environment; `.env` is loaded by app.py beforehand."""
    data_dir = os.getenv("JERP_DATA_DIR", "").strip()
    log_dir = os.getenv("JERP_LOG_DIR", "").strip()
    return AppConfig(
        data_dir=Path(data_dir) if data_dir else DEFAULT_DATA_DIR,
        log_dir=Path(log_dir) if log_dir else DEFAULT_LOG_DIR,
        log_level=os.getenv("JERP_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        password_iterations=max(1, _env_int("JERP_PASSWORD_ITERATIONS", DEFAULT_PASSWORD_ITERATIONS)),
    )
