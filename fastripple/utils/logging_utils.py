import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional, Union


def get_run_logger(
    run_name: str,
    *,
    output_dir: Union[str, Path] = "logs",
    level: int = logging.INFO,
) -> logging.Logger:
    """
    File logger for one detection run. Calling again with the same name reuses it.
    """
    name = str(run_name).strip().replace(" ", "_") or "run"
    logger = logging.getLogger(f"fastripple.run.{name}")
    if logger.handlers:
        return logger

    logger.setLevel(level)
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_path = out_dir / f"{name}_{ts}.log"

    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
    logger.addHandler(fh)
    logger.propagate = False
    logger.info("Log file: %s", str(log_path))
    return logger


def close_run_logger(logger: logging.Logger) -> None:
    """Detach and close file handlers so the log file is released."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def log_section(logger: logging.Logger, title: Optional[str] = None, *, width: int = 72) -> None:
    line = "=" * int(width)
    if title:
        logger.info(line)
        logger.info("%s", str(title))
    logger.info(line)


def log_params(logger: logging.Logger, params: Mapping[str, Any]) -> None:
    for key, value in params.items():
        logger.info("%s=%s", key, value)
