"""
Utility functions for file operations, ignore rules and file collection.
"""

import os
import fnmatch
from pathlib import Path
from typing import List, Optional

from .config import get_configured_excluded_dirs, get_configured_exclude_patterns
from .errors import AnalysisIOError
from .file_classifier import FileClassifier

# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def read_file_content(file_path: str) -> str:
    """
    Reads the content of a file with robust error handling.

    Args:
        file_path (str): The path to the file.

    Returns:
        str: The content of the file, or an empty string if reading fails.
    """
    try:
        with open(file_path, 'r', encoding='utf-8', errors='ignore') as f:
            return f.read()
    except (FileNotFoundError, IOError, UnicodeDecodeError):
        return ""

def count_lines(file_path: str) -> Optional[int]:
    """
    Counts the newline-delimited segments of a file's text.

    A file with content ``"a\\nb\\n"`` has three segments. Returns None when the
    file cannot be read (virtual or aliased paths, permission problems).
    """
    try:
        with open(file_path, 'r', encoding='utf-8', errors='ignore') as f:
            return len(f.read().split('\n'))
    except (OSError, IOError):
        return None

def to_file_id(file_path, root_dir) -> str:
    """Path relative to ``root_dir`` with forward slashes."""
    return Path(os.path.relpath(file_path, root_dir)).as_posix()

# =============================================================================
# FILE FILTERING AND GITIGNORE HANDLING
# =============================================================================

def parse_gitignore(directory, config=None):
    """Parse .gitignore file and return ignore patterns."""
    gitignore_path = Path(directory) / ".gitignore"
    ignore_patterns = set()

    if gitignore_path.exists():
        try:
            with open(gitignore_path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith("#") and not line.startswith("!"):
                        ignore_patterns.add(line.rstrip("/"))
        except (OSError, IOError):
            pass

    ignore_patterns.update(get_configured_exclude_patterns(config))
    return ignore_patterns

def should_ignore(path_str: str, gitignore_patterns: set, base_dir: str, config=None) -> bool:
    """Check if a file or directory should be ignored."""
    try:
        relative_path = Path(path_str).relative_to(base_dir)
    except ValueError:
        return True

    excluded_dirs = get_configured_excluded_dirs(config)
    if any(part in excluded_dirs for part in relative_path.parts):
        return True

    for pattern in gitignore_patterns:
        if fnmatch.fnmatch(relative_path.as_posix(), pattern) or fnmatch.fnmatch(relative_path.name, pattern):
            return True

    return False

# =============================================================================
# FILE COLLECTION UTILITIES
# =============================================================================

def collect_source_files(root_dir, config=None) -> List[str]:
    """
    Walk ``root_dir`` once and return the sorted ``FileId`` list of source files.

    Only files with an allow-listed extension are returned; test/spec files,
    vendor directories and ``.gitignore`` matches are left out.

    Raises:
        AnalysisIOError: if ``root_dir`` is missing, not a directory or unreadable.
    """
    root_dir = os.path.abspath(root_dir)
    if not os.path.isdir(root_dir):
        raise AnalysisIOError(f"Source root does not exist or is not a directory: {root_dir}")
    try:
        os.listdir(root_dir)
    except OSError as e:
        raise AnalysisIOError(f"Source root is not readable: {root_dir} ({e})") from e

    ignore_patterns = parse_gitignore(root_dir, config)
    classifier = FileClassifier(config)

    source_files = []
    for root, dirs, files in os.walk(root_dir):
        # Remove ignored directories in-place
        dirs[:] = sorted(d for d in dirs if not should_ignore(
            os.path.join(root, d), ignore_patterns, root_dir, config))

        for file in files:
            file_path = os.path.join(root, file)
            file_id = to_file_id(file_path, root_dir)
            if not classifier.is_source_file(file_id):
                continue
            if should_ignore(file_path, ignore_patterns, root_dir, config):
                continue
            source_files.append(file_id)

    return sorted(source_files)
