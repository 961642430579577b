"""Console logging setup for operator commands."""

from __future__ import annotations

import logging

from petclaim.security.logging_filters import SensitiveFilter

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    root = logging.getLogger()
    root.setLevel(level)
    if not any(getattr(handler, "_petclaim", False) for handler in root.handlers):
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(_FORMAT))
        console.addFilter(SensitiveFilter())
        console._petclaim = True  # type: ignore[attr-defined]
        root.addHandler(console)
    # SQLAlchemy echoes parameters, including tokens, at INFO.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
