"""
file_classifier.py

This module provides the FileClassifier class, which decides whether a file
takes part in the dependency graph: project source files do, test and spec
files and anything under a vendor directory do not.
"""

import os
import fnmatch
from pathlib import PurePath
from typing import List, Dict, Any, Optional

from .config import (
    get_configured_source_extensions, get_configured_test_patterns,
    get_configured_excluded_dirs
)

class FileClassifier:
    """
    Classifies files by their role within a project.

    The classification follows naming conventions only; file contents are
    never inspected.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initializes the FileClassifier with configuration settings.

        Args:
            config (Optional[Dict[str, Any]]): Configuration dictionary. Reads
                'source_extensions', 'test_file_patterns' and 'exclude_dirs',
                falling back to the defaults for missing keys.
        """
        self.config = config or {}
        self.source_extensions = get_configured_source_extensions(self.config)
        self.test_patterns = get_configured_test_patterns(self.config)
        self.vendor_dirs = get_configured_excluded_dirs(self.config)

    def classify_file(self, file_path: str) -> List[str]:
        """
        Classifies a given file path into one or more categories.

        Args:
            file_path (str): The absolute or relative path to the file.

        Returns:
            List[str]: Sorted categories among 'source', 'test' and 'vendor'.
                       Empty if nothing matches.
        """
        classifications = []
        file_extension = os.path.splitext(file_path)[1].lower()

        if self.is_vendor_path(file_path):
            classifications.append("vendor")
        if self.is_test_file(file_path):
            classifications.append("test")
        if (file_extension in self.source_extensions
                and "test" not in classifications
                and "vendor" not in classifications):
            classifications.append("source")

        return sorted(set(classifications))

    def is_source_file(self, file_path: str) -> bool:
        """True if the file belongs in the dependency graph."""
        return "source" in self.classify_file(file_path)

    def is_test_file(self, file_path: str) -> bool:
        """True if the file name matches a test/spec naming convention."""
        return self._matches_pattern(file_path, self.test_patterns)

    def is_vendor_path(self, file_path: str) -> bool:
        """True if any directory component is an excluded vendor directory."""
        parts = PurePath(file_path.replace("\\", "/")).parts[:-1]
        return any(part in self.vendor_dirs for part in parts)

    def _matches_pattern(self, file_path: str, patterns: List[str]) -> bool:
        file_name = os.path.basename(file_path)
        return any(fnmatch.fnmatch(file_name, pattern) for pattern in patterns)
