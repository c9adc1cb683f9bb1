"""
Tutorial config persistence (platformdirs + JSON).

Persisted items (schema v1):
- output_dir: where run_tutorial() writes the exported figure
- export_width / export_height / export_units / export_dpi: final figure size
- export_format: file suffix of the exported figure ("png", "svg", "html", ...)

Behavior:
- If config file missing or unreadable -> defaults are used
- If schema_version mismatches:
  - default: reset to defaults
  - optional: keep loaded but update version
- Unknown keys in loaded JSON are ignored with warnings
- Invalid values fall back to their defaults with warnings
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from platformdirs import user_config_dir

from plotwalk.plotting.export import IMAGE_FORMATS, UNIT_INCHES
from plotwalk.utils.logging import get_logger

logger = get_logger(__name__)

# Increment when you make a breaking change to the on-disk JSON schema.
SCHEMA_VERSION: int = 1

APP_NAME = "plotwalk"
CONFIG_FILENAME = "plotwalk_config.json"

EXPORT_UNITS = ("px", *UNIT_INCHES)
EXPORT_FORMATS = tuple(sorted(["html", *(s.lstrip(".") for s in IMAGE_FORMATS)]))


@dataclass
class TutorialConfigData:
    """
    JSON-serializable config payload.

    Keep fields JSON-friendly: primitives only.
    """
    schema_version: int = SCHEMA_VERSION
    output_dir: str = "figures"
    export_width: float = 6.0
    export_height: float = 4.0
    export_units: str = "in"
    export_dpi: float = 300.0
    export_format: str = "png"

    def to_json_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "schema_version": self.schema_version,
            "output_dir": self.output_dir,
            "export_width": self.export_width,
            "export_height": self.export_height,
            "export_units": self.export_units,
            "export_dpi": self.export_dpi,
            "export_format": self.export_format,
        }

    @classmethod
    def from_json_dict(cls, d: Dict[str, Any]) -> "TutorialConfigData":
        """
        Tolerant loader:
        - ignores unknown keys
        - tolerates missing or invalid values (defaults are kept)
        """
        defaults = cls()
        try:
            schema_version = int(d.get("schema_version", -1))
        except (TypeError, ValueError):
            schema_version = -1

        output_dir = d.get("output_dir", defaults.output_dir)
        if not isinstance(output_dir, str) or not output_dir:
            logger.warning(f"Invalid output_dir {output_dir!r}, using {defaults.output_dir!r}")
            output_dir = defaults.output_dir

        sizes: dict[str, float] = {}
        for key in ("export_width", "export_height", "export_dpi"):
            default = getattr(defaults, key)
            try:
                value = float(d.get(key, default))
                if value <= 0:
                    raise ValueError(value)
            except (TypeError, ValueError):
                logger.warning(f"Invalid {key} {d.get(key)!r}, using {default}")
                value = default
            sizes[key] = value

        units = d.get("export_units", defaults.export_units)
        if units not in EXPORT_UNITS:
            logger.warning(f"Invalid export_units {units!r}, using {defaults.export_units!r}")
            units = defaults.export_units

        fmt = str(d.get("export_format", defaults.export_format)).lower().lstrip(".")
        if fmt not in EXPORT_FORMATS:
            logger.warning(f"Invalid export_format {fmt!r}, using {defaults.export_format!r}")
            fmt = defaults.export_format

        known_keys = {f.name for f in fields(cls)}
        for key in d.keys():
            if key not in known_keys:
                logger.warning(f"Unknown key '{key}' in plotwalk config, ignoring")

        return cls(
            schema_version=schema_version,
            output_dir=output_dir,
            export_width=sizes["export_width"],
            export_height=sizes["export_height"],
            export_units=units,
            export_dpi=sizes["export_dpi"],
            export_format=fmt,
        )


class TutorialConfig:
    """
    Manager for loading/saving TutorialConfigData to disk.
    """

    def __init__(self, *, path: Path, data: Optional[TutorialConfigData] = None):
        self.path = path
        self.data = data if data is not None else TutorialConfigData()

    @staticmethod
    def default_config_path(
        app_name: str = APP_NAME,
        filename: str = CONFIG_FILENAME,
        app_author: str | None = None,
    ) -> Path:
        """
        Determine OS-appropriate per-user config path.

        macOS:   ~/Library/Application Support/plotwalk/plotwalk_config.json
        Linux:   ~/.config/plotwalk/plotwalk_config.json
        Windows: %APPDATA%\\plotwalk\\plotwalk_config.json
        """
        return Path(user_config_dir(app_name, app_author)) / filename

    @classmethod
    def load(
        cls,
        *,
        config_path: Optional[Path] = None,
        app_name: str = APP_NAME,
        filename: str = CONFIG_FILENAME,
        app_author: str | None = None,
        schema_version: int = SCHEMA_VERSION,
        reset_on_version_mismatch: bool = True,
        create_if_missing: bool = False,
    ) -> "TutorialConfig":
        """
        Load config from disk.

        If file doesn't exist or is unreadable -> defaults.
        If schema mismatch:
          - reset_on_version_mismatch=True -> defaults
          - else -> keep loaded but overwrite schema_version

        If create_if_missing=True and file is missing -> immediately write defaults.
        """
        path = config_path or cls.default_config_path(app_name=app_name, filename=filename, app_author=app_author)
        default_data = TutorialConfigData(schema_version=schema_version)

        try:
            raw = path.read_text(encoding="utf-8")
            parsed = json.loads(raw)
            if not isinstance(parsed, dict):
                logger.warning(f"Config file at {path} does not contain a dict, using defaults")
                return cls(path=path, data=default_data)

            loaded = TutorialConfigData.from_json_dict(parsed)

            if int(loaded.schema_version) != int(schema_version):
                if reset_on_version_mismatch:
                    logger.warning(
                        f"Config schema version mismatch: loaded={loaded.schema_version}, "
                        f"expected={schema_version}, resetting to defaults"
                    )
                    return cls(path=path, data=default_data)
                loaded.schema_version = int(schema_version)

            return cls(path=path, data=loaded)
        except FileNotFoundError:
            logger.debug(f"Config file not found at {path}, using defaults")
            cfg = cls(path=path, data=default_data)
            if create_if_missing:
                cfg.save()
            return cfg
        except json.JSONDecodeError as e:
            logger.warning(f"Config file at {path} is not valid JSON: {e}, using defaults")
            return cls(path=path, data=default_data)
        except OSError as e:
            logger.warning(f"Error reading config from {path}: {e}, using defaults")
            return cls(path=path, data=default_data)

    def save(self) -> None:
        """Write config to disk."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            json_str = json.dumps(self.data.to_json_dict(), indent=2)
            self.path.write_text(json_str, encoding="utf-8")
            logger.info(f"Saved plotwalk config to {self.path}")
        except OSError as e:
            logger.error(f"Error saving plotwalk config to {self.path}: {e}")
            raise

    def export_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for save_figure() (width, height, units, dpi)."""
        return {
            "width": self.data.export_width,
            "height": self.data.export_height,
            "units": self.data.export_units,
            "dpi": self.data.export_dpi,
        }

    def output_path(self, stem: str, output_dir: Optional[Path] = None) -> Path:
        """Path of an exported figure: <output_dir>/<stem>.<export_format>."""
        directory = Path(output_dir) if output_dir is not None else Path(self.data.output_dir)
        return directory / f"{stem}.{self.data.export_format}"
