from __future__ import annotations

import secrets
from pathlib import Path
from typing import Iterable

from django.core.exceptions import SuspiciousFileOperation
from django.utils._os import safe_join


def first_existing(candidates: Iterable[str | Path]) -> Path | None:
    for candidate in candidates:
        path = Path(candidate)
        if path.exists():
            return path
    return None


def existing_dirs(candidates: Iterable[str | Path]) -> list[Path]:
    return [Path(candidate) for candidate in candidates if Path(candidate).is_dir()]


def find_asset(relative_path: str, directories: Iterable[str | Path]) -> Path | None:
    """Return the directory holding ``relative_path``, probing in order."""
    if not relative_path:
        return None
    for directory in existing_dirs(directories):
        try:
            candidate = Path(safe_join(directory, relative_path))
        except SuspiciousFileOperation:
            return None
        if candidate.is_file():
            return directory
    return None


def inject_vite_client(template: str, *, dev_server_url: str, entry_script: str) -> str:
    """Point an SPA template at the Vite dev server.

    The entry script gets a random query so browsers never reuse a stale
    module, and the Vite client plus React refresh preamble go into <head>.
    """
    cache_buster = secrets.token_urlsafe(8)
    page = template.replace(
        f'src="{entry_script}"',
        f'src="{dev_server_url}{entry_script}?v={cache_buster}"',
    )
    preamble = (
        '<script type="module">\n'
        f'import RefreshRuntime from "{dev_server_url}/@react-refresh"\n'
        "RefreshRuntime.injectIntoGlobalHook(window)\n"
        "window.$RefreshReg$ = () => {}\n"
        "window.$RefreshSig$ = () => (type) => type\n"
        "window.__vite_plugin_react_preamble_installed__ = true\n"
        "</script>\n"
        f'<script type="module" src="{dev_server_url}/@vite/client"></script>\n'
    )
    if "</head>" in page:
        return page.replace("</head>", f"{preamble}</head>", 1)
    return preamble + page
