"""Where relative solution and output paths given to the MCP tools point.

The first usable directory wins:
1. the first root the MCP client advertises
2. SLINGSHOT_PROJECT_ROOT, then MCP_PROJECT_ROOT
3. the --project directory the server was started with
4. the directory the server was started in
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlparse

if TYPE_CHECKING:
    from mcp.server.fastmcp import Context

logger = logging.getLogger(__name__)

ROOT_ENV_VARS = ("SLINGSHOT_PROJECT_ROOT", "MCP_PROJECT_ROOT")


@dataclass(frozen=True)
class RootSettings:
    """Server-side fallbacks used when the client has no usable root."""

    project: Path | None = None
    cwd: Path | None = None
    env_vars: tuple[str, ...] = ROOT_ENV_VARS


_settings = RootSettings()


def configure_project_root(
    project: str | Path | None = None,
    cwd: str | Path | None = None,
) -> RootSettings:
    """Record the server's --project directory and startup directory."""
    global _settings
    _settings = RootSettings(
        project=Path(project) if project else None,
        cwd=Path(cwd) if cwd else None,
    )
    logger.debug(f"Root fallbacks: project={_settings.project}, cwd={_settings.cwd}")
    return _settings


def file_uri_to_path(uri: str) -> Path | None:
    """Turn a client root such as file:///srv/app into an absolute path.

    Drive letters (file:///C:/src) and UNC hosts (file://server/share) are
    understood on Windows. Anything else yields None.
    """
    try:
        parts = urlparse(str(uri))
    except ValueError as e:
        logger.warning(f"Unparsable root URI {uri!r}: {e}")
        return None
    if parts.scheme != "file":
        logger.warning(f"Ignoring non-file root {uri!r}")
        return None

    text = unquote(parts.path)
    if sys.platform == "win32":
        if len(text) > 2 and text[0] == "/" and text[2] == ":":
            text = text[1:]
        if parts.netloc:
            text = f"\\\\{parts.netloc}{text}"

    path = Path(text)
    return path if path.is_absolute() else None


async def _client_root(ctx: Context) -> Path | None:
    try:
        roots = await ctx.list_roots()
    except Exception as e:
        # Roots are optional in the protocol
        logger.info(f"Client did not list roots: {e}")
        return None
    if not roots:
        return None

    uri = str(roots[0].uri)
    path = file_uri_to_path(uri)
    if path is None or not path.is_dir():
        logger.warning(f"Client root is not a local directory: {uri}")
        return None
    return path


def _fallback_root(settings: RootSettings) -> Path | None:
    for name in settings.env_vars:
        value = os.environ.get(name)
        if not value:
            continue
        if Path(value).is_dir():
            return Path(value)
        logger.warning(f"{name}={value} is not a directory")

    if settings.project is not None:
        if settings.project.is_dir():
            return settings.project
        logger.warning(f"--project {settings.project} is not a directory")
    return settings.cwd


async def get_project_root(ctx: Context | None = None) -> Path | None:
    """Directory relative tool arguments are resolved against.

    Args:
        ctx: Tool context; None skips the client roots

    Returns:
        The first usable directory, or None when nothing is configured
    """
    root = await _client_root(ctx) if ctx is not None else None
    if root is None:
        root = _fallback_root(_settings)
    if root is None:
        logger.warning("No project root; relative paths use the process CWD")
    else:
        logger.debug(f"Project root: {root}")
    return root


def resolve_path(path: str | Path, root: Path | None) -> Path:
    """Anchor a relative path at the project root."""
    candidate = Path(path)
    if candidate.is_absolute() or root is None:
        return candidate
    return root / candidate
