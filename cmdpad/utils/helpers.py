"""Helper utility functions for cmdpad."""

import json
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, List

from ..utils.logging import logger


def format_duration(seconds: float) -> str:
    """Format an uptime in seconds as a short human readable string."""
    seconds = int(seconds)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}h{minutes:02d}m{secs:02d}s"
    if minutes:
        return f"{minutes}m{secs:02d}s"
    return f"{secs}s"


def parse_assignments(assignments: List[str]) -> Dict[str, str]:
    """Parse ``name=value`` pairs given on the command line.

    Raises:
        ValueError: If an item has no '=' or an empty name
    """
    values: Dict[str, str] = {}
    for item in assignments:
        name, sep, value = item.partition('=')
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"Expected name=value, got '{item}'")
        values[name] = value
    return values


def ensure_directory_exists(directory: Path) -> None:
    """Ensure a directory exists, creating it if necessary."""
    try:
        directory.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Directory ensured: {directory}")
    except Exception as e:
        logger.error(f"Failed to create directory {directory}: {e}")
        raise


def safe_file_write(file_path: Path, content: str, description: str = None) -> bool:
    """Safely write content to a file with error handling."""
    desc = description or f"file {file_path}"
    try:
        file_path.write_text(content)
        logger.system(f"Generated {desc}")
        return True
    except Exception as e:
        logger.error(f"Failed to write {desc}: {e}")
        return False


def atomic_write_json(file_path: Path, data: Any) -> bool:
    """Write JSON through a temporary file in the same directory, then move it in place."""
    temp_name = None
    try:
        ensure_directory_exists(file_path.parent)
        with tempfile.NamedTemporaryFile('w', delete=False, dir=file_path.parent,
                                         suffix='.json', encoding='utf-8') as tmp_f:
            json.dump(data, tmp_f, indent=2, ensure_ascii=False)
            temp_name = tmp_f.name
        
        # Validate the temporary file before replacing the original
        with open(temp_name, 'r', encoding='utf-8') as f:
            json.load(f)
        
        shutil.move(temp_name, str(file_path))
        return True
    except Exception as e:
        logger.error(f"Failed to write {file_path}: {e}")
        if temp_name and Path(temp_name).exists():
            Path(temp_name).unlink()
        return False
