"""
Dependency analysis for building the file-level dependency graph.
"""

import os
import re
from collections import defaultdict
from typing import Dict, List, Mapping, Optional, Sequence

from .config import get_configured_source_extensions
from .utils import read_file_content, collect_source_files
from .workspace_resolver import WorkspaceResolver

# =============================================================================
# DEPENDENCY ANALYSIS CLASSES
# =============================================================================

class DependencyGraph:
    """Ordered file -> dependencies mapping. Duplicate edges are kept."""

    def __init__(self):
        self.imports: Dict[str, List[str]] = {}  # file -> files it imports, in source order
        self.imported_by = defaultdict(list)  # file -> files that import it

    def add_file(self, file_id):
        """Register a node, even if it has no dependencies."""
        self.imports.setdefault(file_id, [])

    def add_dependency(self, from_file, to_file):
        """Add a dependency relationship."""
        self.add_file(from_file)
        self.imports[from_file].append(to_file)
        self.imported_by[to_file].append(from_file)

    def dependencies(self, file_id) -> List[str]:
        return self.imports.get(file_id, [])

    def get_fan_out(self, file_id):
        """Number of outgoing edges, duplicates included."""
        return len(self.imports.get(file_id, []))

    def get_import_count(self, file_id):
        """Number of incoming edges, duplicates included."""
        return len(self.imported_by.get(file_id, []))

    @property
    def nodes_count(self):
        return len(self.imports)

    @property
    def edges_count(self):
        return sum(len(deps) for deps in self.imports.values())

    def to_dict(self) -> Dict[str, List[str]]:
        return {k: list(v) for k, v in self.imports.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Sequence[str]]) -> "DependencyGraph":
        graph = cls()
        for from_file in sorted(data):
            graph.add_file(from_file)
            for to_file in data[from_file]:
                graph.add_dependency(from_file, to_file)
        return graph

    def __len__(self):
        return len(self.imports)

    def __contains__(self, file_id):
        return file_id in self.imports


def as_adjacency(graph) -> Dict[str, List[str]]:
    """Accept a DependencyGraph or any mapping of file -> dependencies."""
    if isinstance(graph, DependencyGraph):
        return graph.imports
    return {key: list(value) for key, value in graph.items()}


class ImportParser:
    """Parses static import statements from JavaScript/TypeScript sources."""

    # One alternative per statement form; exactly one group matches.
    # Dynamic import('x') has no static target and is not matched.
    IMPORT_PATTERN = re.compile(
        r"""
        \bimport\s+[\w*${}\s,]*?\s*\bfrom\s*['"]([^'"\n]+)['"]     # import x from 'y'
        | \bimport\s*['"]([^'"\n]+)['"]                            # import 'y'
        | \bexport\s+[\w*${}\s,]*?\s*\bfrom\s*['"]([^'"\n]+)['"]   # export { x } from 'y'
        | \brequire\s*\(\s*['"]([^'"\n]+)['"]\s*\)                 # require('y')
        """,
        re.VERBOSE,
    )

    @classmethod
    def parse_javascript_imports(cls, content: str) -> List[str]:
        """Return import specifiers in source order, duplicates included."""
        return [m.group(m.lastindex) for m in cls.IMPORT_PATTERN.finditer(content)]

    @classmethod
    def get_file_imports(cls, file_path, extensions=None) -> List[str]:
        """Get imports for a file based on its extension."""
        ext = os.path.splitext(str(file_path))[1].lower()
        allowed = extensions or get_configured_source_extensions(None)
        if ext not in allowed:
            return []
        content = read_file_content(str(file_path))
        if not content:
            return []
        return cls.parse_javascript_imports(content)


def build_dependency_graph(root_dir, config: Optional[dict] = None) -> DependencyGraph:
    """
    Builds the dependency graph of every source file under ``root_dir``.

    Nodes are inserted in lexicographic ``FileId`` order. Imports that do not
    resolve to another tracked file are dropped.

    Raises:
        AnalysisIOError: if ``root_dir`` cannot be enumerated.
    """
    root_dir = os.path.abspath(root_dir)
    extensions = get_configured_source_extensions(config)
    file_ids = collect_source_files(root_dir, config)
    resolver = WorkspaceResolver(file_ids, extensions)

    graph = DependencyGraph()
    for file_id in file_ids:
        graph.add_file(file_id)
        file_path = os.path.join(root_dir, *file_id.split('/'))
        for specifier in ImportParser.get_file_imports(file_path, extensions):
            resolved = resolver.resolve_import(specifier, file_id)
            if resolved is not None:
                graph.add_dependency(file_id, resolved)
    return graph
