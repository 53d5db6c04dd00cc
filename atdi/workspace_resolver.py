"""
workspace_resolver.py

This module provides the WorkspaceResolver class, which maps import
specifiers found in a source file onto the ``FileId`` of another file under
the same source root.
"""

import posixpath
from typing import Iterable, Optional, Sequence

from .config import SCRIPT_EXTS

# ESM TypeScript projects import compiled names ('./x.js') that live in '.ts' files
_COMPILED_TO_SOURCE = {
    '.js': ('.ts', '.tsx'),
    '.jsx': ('.tsx',),
    '.mjs': ('.mts',),
    '.cjs': ('.cts',),
}

class WorkspaceResolver:
    """
    Resolves import specifiers to files tracked under a source root.

    Only relative specifiers ('./x', '../y') are statically resolvable. Bare
    package names, path aliases ('@/x', '~/x') and absolute paths return None.
    """

    def __init__(self, known_files: Iterable[str], extensions: Sequence[str] = SCRIPT_EXTS):
        """
        Args:
            known_files: Every ``FileId`` that may appear as a graph node.
            extensions: Extensions probed for extension-less specifiers, in order.
        """
        self.known_files = set(known_files)
        self.extensions = tuple(extensions)

    def is_relative_import(self, specifier: str) -> bool:
        return specifier == '.' or specifier == '..' or specifier.startswith(('./', '../'))

    def resolve_import(self, specifier: str, from_file: str) -> Optional[str]:
        """
        Resolves ``specifier`` as written inside ``from_file``.

        Args:
            specifier (str): The module string from the import statement.
            from_file (str): ``FileId`` of the importing file.

        Returns:
            Optional[str]: The ``FileId`` of the imported file, or None when the
                           target is not a tracked file.
        """
        specifier = specifier.split('?', 1)[0].split('#', 1)[0]
        if not self.is_relative_import(specifier):
            return None

        base = posixpath.normpath(posixpath.join(posixpath.dirname(from_file), specifier))
        if base == '..' or base.startswith('../'):
            return None  # escapes the source root

        for candidate in self._candidates(base):
            if candidate in self.known_files:
                return candidate
        return None

    def _candidates(self, base: str):
        if base != '.':
            yield base
            stem, ext = posixpath.splitext(base)
            for source_ext in _COMPILED_TO_SOURCE.get(ext, ()):
                yield stem + source_ext
            for ext in self.extensions:
                yield base + ext
        for ext in self.extensions:
            yield posixpath.normpath(posixpath.join(base, 'index' + ext))
