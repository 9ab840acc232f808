"""
Logging for trialkey.
Configure once with setup_logging(); use get_logger() everywhere else.
The library itself never adds handlers; only the CLI calls setup_logging().
"""
import logging
import os
from pathlib import Path
from typing import Optional

ROOT_NAME = "trialkey"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s %(message)s"
_setup_done = False


def setup_logging(
    level: int = logging.WARNING,
    log_file: Optional[os.PathLike | str] = None,
    use_console: bool = True,
) -> None:
    """
    Configure the trialkey root logger: level, stderr handler, optional file handler.
    Idempotent; later calls are ignored.
    """
    global _setup_done
    if _setup_done:
        return

    root = logging.getLogger(ROOT_NAME)
    root.setLevel(level)
    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)

    if use_console:
        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(formatter)
        root.addHandler(console)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    _setup_done = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under trialkey.* (e.g. trialkey.storage)."""
    if not name.startswith(ROOT_NAME + "."):
        name = f"{ROOT_NAME}.{name}"
    return logging.getLogger(name)


logging.getLogger(ROOT_NAME).addHandler(logging.NullHandler())
