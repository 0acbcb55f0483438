"""IconSetJSONAdapter for reading icon set JSON files.

This adapter handles JSON file reading and normalizes legacy alias shapes.
"""

import json
from pathlib import Path

from loguru import logger

from .base_adapter import STANDARD_KEYS, BaseAdapter


class IconSetJSONAdapter(BaseAdapter):
    """Adapter for icon set JSON files.

    Args:
        file_path: Path to JSON file
    """

    def __init__(self, file_path: Path | str) -> None:
        """Initialize adapter.

        Args:
            file_path: Path to JSON file

        Raises:
            FileNotFoundError: JSON file does not exist
        """
        self.file_path = Path(file_path)
        if not self.file_path.exists():
            raise FileNotFoundError(f"JSON file not found: {self.file_path}")

    def __str__(self) -> str:
        return str(self.file_path)

    def read(self) -> dict:
        """Read a JSON file into a dict.

        Returns:
            Parsed icon set data

        Raises:
            ValueError: Failed to read JSON or root is not an object
        """
        try:
            with open(self.file_path, encoding="utf-8") as f:
                data = json.load(f)
        except Exception as e:
            raise ValueError(f"Failed to read JSON: {self.file_path}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Icon set JSON must contain an object: {self.file_path}")
        return data

    def validate(self, data: dict) -> bool:
        """Validate top-level key types."""
        for key, expected in STANDARD_KEYS.items():
            if not isinstance(data.get(key), expected):
                logger.warning(f"Unexpected type for '{key}' in {self.file_path}")
                return False
        return True

    def repair(self, data: dict) -> dict:
        """Normalize legacy alias entries.

        Aliases written as ``"name": "parent"`` become ``{"parent": "parent"}``.
        Other non-object aliases are dropped with a warning.
        """
        aliases = data.get("aliases")
        if not isinstance(aliases, dict):
            return data

        normalized: dict[str, dict] = {}
        dropped: list[str] = []
        for name, item in aliases.items():
            if isinstance(item, str):
                normalized[name] = {"parent": item}
            elif isinstance(item, dict):
                normalized[name] = item
            else:
                dropped.append(name)

        if dropped:
            logger.warning(f"Dropped {len(dropped)} malformed alias(es) in {self.file_path}: {', '.join(dropped)}")

        return {**data, "aliases": normalized}
