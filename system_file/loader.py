from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Union

import yaml


def load_system_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML system file into plain Python structures.
    An empty file is an empty system.
    """
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level, got {type(data).__name__}")
    return data
