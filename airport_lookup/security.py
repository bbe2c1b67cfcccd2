"""Output path validation for generated units."""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
import logging
from typing import Iterable, Optional

class SecurityError(Exception):
    """Raised when security validation fails."""
    pass

ALLOWED_BASE_DIRS = [
    str(Path.home()),
    os.getcwd(),
    tempfile.gettempdir(),
]

logger = logging.getLogger(__name__)

def validate_folder_path(folder_path: Path, allowed_base_dirs: Optional[Iterable[str]] = None) -> None:
    """Reject output folders outside the allowed bases; generation wipes the folder it writes to."""
    allowed = list(allowed_base_dirs) if allowed_base_dirs is not None else ALLOWED_BASE_DIRS
    resolved_path = Path(folder_path).resolve()
    for allowed_base in allowed:
        allowed_resolved = Path(allowed_base).resolve()
        if resolved_path == allowed_resolved:
            # a base directory itself is never an output folder
            continue
        try:
            resolved_path.relative_to(allowed_resolved)
            logger.info("Path validation passed: %s", folder_path)
            return
        except ValueError:
            continue
    raise SecurityError(
        f"Folder path '{folder_path}' is outside allowed directories: {allowed}"
    )
