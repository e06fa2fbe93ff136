import json
from pathlib import Path
from typing import Any, Dict, Optional

import cv2
import numpy as np


class FileIO:
    def load_image(self, filepath: Path) -> Optional[np.ndarray]:
        filepath = Path(filepath)
        if not filepath.exists():
            return None
        try:
            # np.fromfile + imdecode keeps non-ASCII paths working
            data = np.fromfile(str(filepath), dtype=np.uint8)
            if data.size == 0:
                return None
            return cv2.imdecode(data, cv2.IMREAD_GRAYSCALE)
        except (OSError, cv2.error):
            return None

    def save_image(self, filepath: Path, image: np.ndarray) -> None:
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        try:
            ok, encoded = cv2.imencode(filepath.suffix or ".png", image)
        except cv2.error as e:
            raise OSError(f"Cannot encode image as {filepath.suffix!r}: {e}") from e
        if not ok:
            raise OSError(f"Failed to encode image for {filepath}")
        encoded.tofile(str(filepath))


def read_json(filepath: Path) -> Dict[str, Any]:
    """JSON object stored at filepath; a missing or blank file reads as {}."""
    filepath = Path(filepath)
    if not filepath.is_file():
        return {}
    text = filepath.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {filepath}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {filepath}, got {type(data).__name__}")
    return data


def write_json(data: Dict[str, Any], filepath: Path) -> None:
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    filepath.write_text(json.dumps(data, indent=4) + "\n", encoding="utf-8")
