import copy
import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from edge_response.utils.file_io import read_json, write_json


class ConfigError(ValueError):
    pass


class ConfigManager:
    """
    Nested analysis settings addressed by dotted keys such as
    "detector.canny_low". Backed by a JSON object on disk or a plain dict.
    """

    def __init__(self, path: Optional[Path] = None, data: Optional[Dict[str, Any]] = None):
        self.config_path = Path(path) if path else None
        if data is not None:
            self._data = copy.deepcopy(data)
        elif self.config_path is not None:
            try:
                self._data = read_json(self.config_path)
            except ValueError as e:
                raise ConfigError(str(e)) from e
        else:
            self._data = {}

    def get(self, key: str, default: Any = None) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def section(self, name: str) -> Dict[str, Any]:
        node = self.get(name)
        return dict(node) if isinstance(node, dict) else {}

    def set(self, key: str, value: Any) -> None:
        *parents, leaf = key.split(".")
        node = self._data
        for part in parents:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node[leaf] = value

    def apply_overrides(self, assignments: Iterable[str]) -> None:
        """Apply "section.key=value" strings; values are parsed as JSON when possible."""
        for assignment in assignments:
            key, sep, raw = assignment.partition("=")
            if not sep or not key.strip():
                raise ConfigError(f"Expected KEY=VALUE, got {assignment!r}")
            try:
                value = json.loads(raw)
            except json.JSONDecodeError:
                value = raw
            self.set(key.strip(), value)

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)

    def save(self, path: Optional[Path] = None) -> Path:
        target = Path(path) if path else self.config_path
        if target is None:
            raise ConfigError("No configuration path to save to")
        write_json(self._data, target)
        return target
