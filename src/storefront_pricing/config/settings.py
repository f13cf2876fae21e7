"""
Centralized settings and path configuration for the storefront pricing package.

Store settings (tax rate, inclusive-tax flag, shipping) live in a key/value
table exported from the shop's settings store, as CSV or as an Excel sheet.
"""
import json
import logging
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from .parsers import parse_bool

logger = logging.getLogger(__name__)

SETTINGS_SHEET = 'Settings'
SETTINGS_COLUMNS = ('key', 'value', 'type')


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Key/value export of the store settings table
    store_settings: Path

    # Golden regression cases for the totals calculation
    golden_cases: Optional[Path] = None

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure."""
        root = project_root or get_project_root()

        # Prefer a workbook export when the shop provides one
        store_settings = root / 'store_settings.xlsx'
        if not store_settings.exists():
            store_settings = root / 'src' / 'storefront_pricing' / 'data' / 'store_settings.csv'

        return cls(
            project_root=root,
            store_settings=store_settings,
            golden_cases=root / 'tests' / 'golden_cases.csv',
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def cast_setting(value: str, type_name: str):
    """Cast a stored setting value by its declared type."""
    type_name = (type_name or 'string').strip().lower()
    if type_name == 'boolean':
        return parse_bool(value)
    if type_name == 'json':
        return json.loads(value) if value else None
    return value


def read_settings_table(path: Path) -> pd.DataFrame:
    """Read the raw key/value/type table, stripping all strings."""
    if path.suffix.lower() in ('.xlsx', '.xls'):
        df = pd.read_excel(path, sheet_name=SETTINGS_SHEET, dtype=str)
    else:
        df = pd.read_csv(path, dtype=str)

    df = df.fillna('')
    df.columns = [str(c).strip().lower() for c in df.columns]
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()

    missing = [c for c in SETTINGS_COLUMNS[:2] if c not in df.columns]
    if missing:
        raise ValueError(f"Settings table {path} is missing columns: {', '.join(missing)}")
    if 'type' not in df.columns:
        df['type'] = 'string'
    return df


def load_store_settings(path: Path) -> dict:
    """
    Load store settings as a dict of typed values.

    Later rows win when a key repeats. Rows without a key are skipped.

    Raises:
        FileNotFoundError: the table does not exist
        ValueError: the table lacks key/value columns or has bad JSON values
    """
    if not path.exists():
        raise FileNotFoundError(f"Store settings not found at {path}")

    df = read_settings_table(path)

    values = {}
    errors = []
    for line_num, row in enumerate(df.to_dict(orient='records'), start=2):
        key = row['key']
        if not key:
            continue
        try:
            values[key] = cast_setting(row['value'], row['type'])
        except json.JSONDecodeError as e:
            errors.append(f"Row {line_num}: setting '{key}' is not valid JSON ({e.msg})")

    if errors:
        raise ValueError("Invalid store settings:\n" + "\n".join(errors))

    logger.debug("Loaded %d store settings from %s", len(values), path)
    return values
