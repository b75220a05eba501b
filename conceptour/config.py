"""Settings for conceptour."""

import json
import logging
import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, asdict, fields

logger = logging.getLogger(__name__)

ENV_PREFIX = "CONCEPTOUR_"


def get_config_dir() -> Path:
    """Get the application config directory."""
    base = os.environ.get("XDG_CONFIG_HOME")
    config_dir = (Path(base) if base else Path.home() / ".config") / "conceptour"
    return config_dir


@dataclass
class TourSettings:
    """Tunables for the tour, the outline and logging."""
    autoscroll_threshold: int = 60      # px from the list edge where scrolling kicks in
    autoscroll_max_step: int = 12       # px per tick right at the edge
    autoscroll_interval_ms: int = 16
    indent_root: int = 16
    indent_category: int = 24
    indent_content: int = 40
    detail_panel_width: int = 480
    narrow_breakpoint: int = 768
    max_undo: int = 20
    log_level: str = "INFO"

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, data: Optional[str]) -> "TourSettings":
        if not data:
            return cls()
        try:
            d = json.loads(data)
            # Filter to only known fields to handle schema evolution
            known = {f.name for f in fields(cls)}
            return cls(**{k: v for k, v in d.items() if k in known})
        except (json.JSONDecodeError, TypeError, AttributeError):
            return cls()

    def apply_env(self, environ=None) -> "TourSettings":
        """Override fields from CONCEPTOUR_<FIELD> environment variables."""
        environ = os.environ if environ is None else environ
        for f in fields(self):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            if f.type in (int, "int"):
                try:
                    setattr(self, f.name, int(raw))
                except ValueError:
                    logger.warning("Ignoring %s%s=%r: not an integer", ENV_PREFIX, f.name.upper(), raw)
            else:
                setattr(self, f.name, raw)
        return self

    def indent_for_level(self, level: int) -> int:
        return (self.indent_root, self.indent_category, self.indent_content)[level]


def load_settings(path: Optional[Path] = None, environ=None) -> TourSettings:
    """Load settings.json (if present) and apply environment overrides."""
    path = path or get_config_dir() / "settings.json"
    data = None
    if path.exists():
        data = path.read_text(encoding="utf-8")
    return TourSettings.from_json(data).apply_env(environ)
