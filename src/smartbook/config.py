# SmartBook - Cash-basis bookkeeping & financial statements for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for SmartBook.

This module is responsible for:
- loading the application configuration from a TOML file,
- falling back to built-in defaults when no configuration file exists,
- exposing typed dataclasses used by the rest of the application,
- loading the classification table selected by the configuration.
"""

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .classification import ClassificationTable
from .db import DatabaseConfig

DEFAULT_CONFIG_FILE = "smartbook_config.toml"
DEFAULT_DB_PATH = "data/db/smartbook.sqlite"
DISPLAY_MODES: tuple[str, ...] = ("table", "csv", "both")


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for SmartBook.

    This aggregates:
    - the database configuration (where transactions are stored),
    - the optional classification CSV overriding the built-in categories,
    - display options for tables and ratios,
    - the default logging level.
    """

    database: DatabaseConfig
    classification_file: Optional[Path]
    display_mode: str
    currency: str
    ratio_decimals: int
    log_level: Optional[str]


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        raise ValueError(f"Config section [{name}] must be a table.")
    return section


def _parse_config(raw: Mapping[str, Any], base_dir: Path) -> AppConfig:
    # 1) Database
    database_section = _section(raw, "database")
    db_engine = str(database_section.get("engine") or "sqlite")
    db_path_raw = database_section.get("path") or DEFAULT_DB_PATH
    database = DatabaseConfig(
        engine=db_engine, path=(base_dir / str(db_path_raw)).resolve()
    )

    # 2) Classification table
    classification_section = _section(raw, "classification")
    file_raw = classification_section.get("file") or None
    classification_file = (
        (base_dir / str(file_raw)).resolve() if file_raw else None
    )

    # 3) Display options
    display_section = _section(raw, "display")
    display_mode = str(display_section.get("mode", "table")).lower()
    if display_mode not in DISPLAY_MODES:
        raise ValueError(
            f"Invalid display mode {display_mode!r}. "
            f"Expected one of: {', '.join(DISPLAY_MODES)}."
        )
    currency = str(display_section.get("currency", "RM"))
    try:
        ratio_decimals = int(display_section.get("ratio_decimals", 1))
    except (TypeError, ValueError):
        ratio_decimals = 1

    # 4) Logging
    logging_section = _section(raw, "logging")
    level_raw = logging_section.get("level")
    log_level = str(level_raw) if level_raw else None

    return AppConfig(
        database=database,
        classification_file=classification_file,
        display_mode=display_mode,
        currency=currency,
        ratio_decimals=ratio_decimals,
        log_level=log_level,
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the SmartBook application configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [database]
        engine ("sqlite") and path of the SQLite file.

    [classification]
        file: optional CSV overriding the built-in category table.

    [display]
        mode ("table", "csv" or "both"), currency prefix and ratio decimals.

    [logging]
        level: default log level (overridden by --log-level).

    Notes
    -----
    - When ``config_path`` is None, ``smartbook_config.toml`` is looked up
      in the current directory. If it does not exist, built-in defaults are
      used (database under ./data/db/).
    - All file paths in the TOML are resolved relative to the directory of
      the TOML file itself.

    Raises
    ------
    FileNotFoundError
        If an explicit ``config_path`` does not exist.
    ValueError
        If the TOML cannot be parsed or holds invalid values.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        if not config_file.is_file():
            return _parse_config({}, Path.cwd())
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    return _parse_config(raw, config_file.parent)


def load_classification_table(app_config: AppConfig) -> ClassificationTable:
    """Return the configured classification table (CSV override or default)."""
    if app_config.classification_file is None:
        return ClassificationTable.default()
    if not app_config.classification_file.is_file():
        raise FileNotFoundError(
            f"Classification file not found: {app_config.classification_file}"
        )
    return ClassificationTable.from_csv(app_config.classification_file)
