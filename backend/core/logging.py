from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from core.config import BACKEND_DIR


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"

# Loggers that write to their own rotating file in production.
IMPORT_LOGGER = "services.excel_import"

# Third-party loggers held above the app level.
_QUIET_LOGGERS = {
    # SQL echo at DEBUG is far too chatty for dev consoles.
    "sqlalchemy.engine": logging.WARNING,
    # python-multipart logs every parsed chunk at DEBUG.
    "multipart": logging.INFO,
    "python_multipart": logging.INFO,
}

_HANDLER_MARK = "_college_admin_handler"


def _rotating(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(*, environment: str, logs_dir: Path | None = None) -> list[logging.Handler]:
    """Configure application logging.

    - Dev/test: console only, DEBUG level.
    - Prod: console plus ``logs/app.log``, INFO level; roster imports are also
      written to ``logs/imports.log`` so upload outcomes can be audited apart
      from request noise.

    Calling it again is a no-op; the handlers installed by the first call are
    returned.
    """

    root = logging.getLogger()
    installed = [
        h
        for h in (*root.handlers, *logging.getLogger(IMPORT_LOGGER).handlers)
        if getattr(h, _HANDLER_MARK, False)
    ]
    if installed:
        return installed

    env = (environment or "development").lower().strip()
    level = logging.INFO if env == "production" else logging.DEBUG
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    handlers: list[logging.Handler] = [console]

    import_handler: logging.Handler | None = None
    if env == "production":
        target = Path(logs_dir or BACKEND_DIR / "logs")
        target.mkdir(parents=True, exist_ok=True)
        handlers.append(_rotating(target / "app.log", level, formatter))
        import_handler = _rotating(target / "imports.log", logging.INFO, formatter)

    for handler in handlers:
        setattr(handler, _HANDLER_MARK, True)
        root.addHandler(handler)
    root.setLevel(level)

    if import_handler is not None:
        setattr(import_handler, _HANDLER_MARK, True)
        logging.getLogger(IMPORT_LOGGER).addHandler(import_handler)
        handlers.append(import_handler)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)
    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)

    return handlers
