"""
JSON persistence for pipeline artifacts.
Writes go through a temporary file and an atomic rename so readers never
observe a partially written record.
"""

import os
import json
import tempfile
from pathlib import Path
from typing import Any, Union
import logging

from utils.exceptions import DataLoadError

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def write_json_atomic(filepath: Union[str, Path], payload: Any) -> Path:
    """
    Serialize ``payload`` as indented JSON and atomically replace ``filepath``.
    
    Args:
        filepath: Destination file
        payload: JSON-serializable object
        
    Returns:
        Path of the written file
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{filepath.name}.", suffix=".tmp", dir=str(filepath.parent)
    )
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, default=str)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, filepath)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    
    logger.info(f"Wrote {filepath}")
    return filepath


def read_json(filepath: Union[str, Path]) -> Any:
    """
    Read a JSON artifact.
    
    Raises:
        DataLoadError: If the file is missing or is not valid JSON
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise DataLoadError(f"File not found: {filepath}")
    
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise DataLoadError(f"Invalid JSON in {filepath}: {e}") from e
    except OSError as e:
        raise DataLoadError(f"Cannot read {filepath}: {e}") from e
