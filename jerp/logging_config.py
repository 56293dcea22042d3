import logging
import logging.handlers
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s:%(lineno)d] %(message)s"
_HANDLER_MARKER = "_jerp_handler"


def setup_logging(log_dir: Path, level: str = "INFO", app_name: str = "jerp") -> logging.Logger:
    """
    Configures the root logger with a console handler and a rotating file handler.

    Streamlit re-executes the script on every interaction, so handlers installed by an
    earlier run are detected and left in place instead of being stacked again.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if any(getattr(handler, _HANDLER_MARKER, False) for handler in root_logger.handlers):
        return root_logger

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    setattr(console_handler, _HANDLER_MARKER, True)
    root_logger.addHandler(console_handler)

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / f"{app_name}.log",
            maxBytes=5 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
    except OSError as exc:
        root_logger.warning("File logging disabled, cannot write to %s: %s", log_dir, exc)
    else:
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_MARKER, True)
        root_logger.addHandler(file_handler)

    return root_logger
