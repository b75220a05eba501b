"""Environment and dependency preflight checks.

The core tour logic is headless; these checks guard the GTK front end.
Set CONCEPTOUR_SKIP_PREFLIGHT=1 to bypass (useful for development).
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PreflightResult:
    ok: bool
    message: str


def _has_display(environ=None) -> bool:
    environ = os.environ if environ is None else environ
    return bool(environ.get("WAYLAND_DISPLAY") or environ.get("DISPLAY"))


def _check_python_deps() -> Optional[str]:
    """Return an error message if required deps are missing."""
    try:
        import cairo  # type: ignore[import-not-found]  # noqa: F401
    except Exception as exc:  # pylint: disable=broad-except
        return (
            "Missing Python dependency 'pycairo'. "
            "Install it with pip (pycairo) and ensure cairo is available. "
            f"Underlying error: {exc}"
        )

    try:
        import gi  # type: ignore[import-not-found]

        gi.require_version("Gtk", "4.0")
        gi.require_version("Adw", "1")
        gi.require_version("Gdk", "4.0")
        from gi.repository import Gtk, Adw, Gdk  # type: ignore[import-not-found]  # noqa: F401
    except Exception as exc:  # pylint: disable=broad-except
        return (
            "Missing GTK/libadwaita bindings. Install GTK 4, libadwaita and "
            "gobject-introspection from your distribution, then `pip install conceptour[gui]`. "
            f"Underlying error: {exc}"
        )

    return None


def run_preflight(
    *,
    require_display: bool = True,
    check_deps: bool = True,
    environ=None,
) -> PreflightResult:
    """Run checks and return a structured result."""
    environ = os.environ if environ is None else environ
    if environ.get("CONCEPTOUR_SKIP_PREFLIGHT") == "1":
        return PreflightResult(True, "Preflight skipped via CONCEPTOUR_SKIP_PREFLIGHT=1")

    if require_display and not _has_display(environ):
        return PreflightResult(
            False,
            "No graphical session detected (neither WAYLAND_DISPLAY nor DISPLAY is set). "
            "Set CONCEPTOUR_SKIP_PREFLIGHT=1 to bypass.",
        )

    if check_deps:
        dep_error = _check_python_deps()
        if dep_error:
            return PreflightResult(False, dep_error)

    return PreflightResult(True, "Preflight OK")


def run_preflight_or_die(
    *,
    require_display: bool = True,
    check_deps: bool = True,
) -> None:
    result = run_preflight(
        require_display=require_display,
        check_deps=check_deps,
    )
    if result.ok:
        return

    sys.stderr.write("\nconceptour preflight check failed:\n")
    sys.stderr.write(result.message)
    sys.stderr.write("\n\n")
    sys.stderr.write(
        "Suggested setup:\n"
        "  Fedora: sudo dnf install gtk4 libadwaita python3-gobject cairo-devel\n"
        "  Debian/Ubuntu: sudo apt install gir1.2-gtk-4.0 gir1.2-adw-1 libcairo2-dev\n"
        "  pip install 'conceptour[gui]'\n\n"
    )
    raise SystemExit(1)
