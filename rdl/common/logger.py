import logging
import os
from pathlib import Path
from logging.handlers import RotatingFileHandler
from rdl.common.setup import PATHS
from datetime import datetime

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(filename)s:%(lineno)d] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attaches the handler built by `factory` unless the logger already carries one under that name. Keeps
# get_logger() safe to call repeatedly (tests, re-imports) without doubling every line.
def _attach(logger: logging.Logger, handler_name, level, fmt, factory):
    if any(h.get_name() == handler_name for h in logger.handlers):
        return None
    handler = factory()
    handler.setLevel(level)
    handler.setFormatter(fmt)
    handler.set_name(handler_name)
    logger.addHandler(handler)
    return handler

# Keeps only the newest `keep` per-run debug logs.
def _prune_debug_runs(debug_dir: Path, name, keep):
    runs = sorted(debug_dir.glob(f"{name}_*.log"),key=lambda p: p.stat().st_mtime,reverse=True)
    for run in runs[keep:]:
        try: run.unlink()
        except OSError: pass

def get_logger(
        name = "ridedatalogger",
        level = logging.INFO,
        log_dir: Path | None = None,
        max_bytes = 2 * 1024 * 1024,
        backup_count = 5,
        console = False,
        historical_debugs: int = 10
) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(min(level, logging.DEBUG) if historical_debugs > 0 else level)

    log_dir = log_dir or PATHS.logs
    log_dir.mkdir(parents=True,exist_ok=True)
    fmt = logging.Formatter(LOG_FORMAT,LOG_DATE_FORMAT)

    # Rotating log that survives across drives
    _attach(logger, f"{name}:persistent", level, fmt, lambda: RotatingFileHandler(
        filename=log_dir / f"{name}.log",
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    ))

    # latest.log is truncated on every launch, so it only ever describes the current drive
    _attach(logger, f"{name}:latest", level, fmt, lambda: logging.FileHandler(
        filename=log_dir / "latest.log", mode="w", encoding="utf-8"))

    # Full DEBUG trace for each run, pruned to the newest few
    if historical_debugs > 0:
        debug_dir = log_dir / "debug"
        debug_dir.mkdir(parents=True,exist_ok=True)
        added = _attach(logger, f"{name}:historical_debug", logging.DEBUG, fmt, lambda: logging.FileHandler(
            filename=debug_dir / f"{name}_{datetime.now():%Y-%m-%d_%H-%M-%S}.log", encoding="utf-8"))
        if added is not None:
            _prune_debug_runs(debug_dir, name, historical_debugs)

    if console:
        _attach(logger, f"{name}:console", level, fmt, logging.StreamHandler)

    return logger

_LEVELS = {"DEBUG": logging.DEBUG, "INFO": logging.INFO, "WARNING": logging.WARNING, "ERROR": logging.ERROR}

# RDL_LOG_LEVEL accepts DEBUG, INFO, WARNING or ERROR; RDL_LOG_CONSOLE=1 mirrors the log to stderr.
log = get_logger(
    level=_LEVELS.get(os.getenv("RDL_LOG_LEVEL", "INFO").upper(), logging.INFO),
    console=os.getenv("RDL_LOG_CONSOLE") == "1",
    historical_debugs=10,
)
log.info("=== STARTED NEW RIDE LOGGER RUN ===")
