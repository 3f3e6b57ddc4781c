"""Atomic output files."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def write_atomic(path: str | Path, text: str) -> Path:
    """Write text to path through a temp file in the same directory.

    The target is either left untouched or fully replaced. Line endings are
    written exactly as given.
    """
    target = Path(path)
    fd, name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    tmp = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise

    os.replace(tmp, target)
    logger.debug(f"Wrote {len(text)} characters to {target}")
    return target
