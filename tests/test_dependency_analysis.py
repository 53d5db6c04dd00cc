#!/usr/bin/env python3
"""
Test Dependency Analysis

Tests for import extraction, import resolution and construction of the
file-level dependency graph.
"""

import unittest
import tempfile
import os
import shutil
from pathlib import Path
import sys

# Add project root to path for testing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from atdi.dependency_analysis import DependencyGraph, ImportParser, build_dependency_graph
from atdi.workspace_resolver import WorkspaceResolver
from atdi.errors import AnalysisIOError
from atdi.utils import collect_source_files


class TestImportParser(unittest.TestCase):
    """Test import statement extraction."""

    def test_static_import_forms_in_source_order(self):
        """Every static import form is found, in order, with duplicates."""
        content = """
import React from 'react';
import { a, b } from "./a";
import type { T } from './types';
import './styles.css';
export * from './b';
export { c } from './c';
const d = require('./d');
const lazy = import('./lazy');
import {
  x,
  y,
} from './multi';
import './a';
"""
        imports = ImportParser.parse_javascript_imports(content)
        self.assertEqual(imports, [
            'react', './a', './types', './styles.css', './b', './c', './d', './multi', './a'
        ])

    def test_dynamic_imports_are_ignored(self):
        """import() calls have no static target."""
        content = "const page = await import('./page');\nconst other = import(\"./other\");"
        self.assertEqual(ImportParser.parse_javascript_imports(content), [])

    def test_non_script_file_has_no_imports(self):
        """Files outside the extension allow-list are not parsed."""
        temp_dir = tempfile.mkdtemp()
        try:
            path = Path(temp_dir) / "notes.md"
            path.write_text("import x from './y'")
            self.assertEqual(ImportParser.get_file_imports(str(path)), [])
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)


class TestWorkspaceResolver(unittest.TestCase):
    """Test resolution of import specifiers to FileIds."""

    def setUp(self):
        self.resolver = WorkspaceResolver([
            "a.ts", "lib/b.tsx", "lib/index.ts", "features/x.ts", "legacy/util.js"
        ])

    def test_relative_specifiers(self):
        self.assertEqual(self.resolver.resolve_import("./a", "main.ts"), "a.ts")
        self.assertEqual(self.resolver.resolve_import("./lib/b", "main.ts"), "lib/b.tsx")
        self.assertEqual(self.resolver.resolve_import("../a", "lib/b.tsx"), "a.ts")
        self.assertEqual(self.resolver.resolve_import("../legacy/util.js", "features/x.ts"), "legacy/util.js")

    def test_directory_import_resolves_to_index(self):
        self.assertEqual(self.resolver.resolve_import("./lib", "a.ts"), "lib/index.ts")
        self.assertEqual(self.resolver.resolve_import("..", "lib/b.tsx"), None)
        self.assertEqual(self.resolver.resolve_import(".", "lib/b.tsx"), "lib/index.ts")

    def test_compiled_extension_maps_to_typescript_source(self):
        self.assertEqual(self.resolver.resolve_import("./features/x.js", "a.ts"), "features/x.ts")

    def test_unresolvable_specifiers_return_none(self):
        """Packages, aliases, missing files and paths outside the root are dropped."""
        for specifier in ["react", "@/a", "~/lib/b", "/abs/a", "./missing", "../../outside"]:
            with self.subTest(specifier=specifier):
                self.assertIsNone(self.resolver.resolve_import(specifier, "lib/b.tsx"))


class TestDependencyGraph(unittest.TestCase):
    """Test the graph container."""

    def test_duplicate_edges_count_towards_fan_out(self):
        graph = DependencyGraph()
        graph.add_dependency("a.ts", "b.ts")
        graph.add_dependency("a.ts", "b.ts")
        graph.add_file("b.ts")

        self.assertEqual(graph.dependencies("a.ts"), ["b.ts", "b.ts"])
        self.assertEqual(graph.get_fan_out("a.ts"), 2)
        self.assertEqual(graph.get_import_count("b.ts"), 2)
        self.assertEqual(graph.nodes_count, 2)
        self.assertEqual(graph.edges_count, 2)

    def test_from_dict_round_trip_keeps_order(self):
        data = {"b.ts": ["a.ts"], "a.ts": ["b.ts", "b.ts"]}
        graph = DependencyGraph.from_dict(data)
        self.assertEqual(list(graph.to_dict()), ["a.ts", "b.ts"])
        self.assertEqual(graph.to_dict()["a.ts"], ["b.ts", "b.ts"])


class TestBuildDependencyGraph(unittest.TestCase):
    """Test graph construction from a source tree."""

    def setUp(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.src = Path(self.temp_dir) / "src"
        (self.src / "lib").mkdir(parents=True)
        (self.src / "node_modules" / "pkg").mkdir(parents=True)

        (self.src / "index.ts").write_text(
            "import { a } from './a';\n"
            "import './a';\n"
            "import x from 'lodash';\n"
            "import y from '@/alias';\n"
            "import './missing';\n"
        )
        (self.src / "a.ts").write_text("import { b } from './lib/b';\n")
        (self.src / "lib" / "b.tsx").write_text("import { a } from '../a';\n")
        (self.src / "lib" / "index.ts").write_text("")
        (self.src / "c.js").write_text("const lib = require('./lib');\n")
        (self.src / "a.test.ts").write_text("import './a';\n")
        (self.src / "node_modules" / "pkg" / "index.js").write_text("require('../../a');\n")
        (self.src / "README.md").write_text("# docs")

    def tearDown(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_graph_nodes_and_edges(self):
        graph = build_dependency_graph(str(self.src))

        self.assertEqual(list(graph.imports), ["a.ts", "c.js", "index.ts", "lib/b.tsx", "lib/index.ts"])
        self.assertEqual(graph.dependencies("index.ts"), ["a.ts", "a.ts"])
        self.assertEqual(graph.dependencies("a.ts"), ["lib/b.tsx"])
        self.assertEqual(graph.dependencies("lib/b.tsx"), ["a.ts"])
        self.assertEqual(graph.dependencies("c.js"), ["lib/index.ts"])
        self.assertEqual(graph.dependencies("lib/index.ts"), [])
        self.assertEqual(graph.nodes_count, 5)
        self.assertEqual(graph.edges_count, 5)

    def test_gitignore_patterns_are_excluded(self):
        (self.src / ".gitignore").write_text("generated/\n# comment\n")
        (self.src / "generated").mkdir()
        (self.src / "generated" / "api.ts").write_text("")

        self.assertNotIn("generated/api.ts", collect_source_files(str(self.src)))

    def test_collection_follows_file_classifier(self):
        (self.src / "app_test.ts").write_text("")
        config = {"source_extensions": ["ts"], "test_file_patterns": ["*_test.ts"]}

        files = collect_source_files(str(self.src), config)

        self.assertEqual(files, ["a.test.ts", "a.ts", "index.ts", "lib/index.ts"])

    def test_empty_tree_gives_empty_graph(self):
        empty = Path(self.temp_dir) / "empty"
        empty.mkdir()
        graph = build_dependency_graph(str(empty))
        self.assertEqual(graph.nodes_count, 0)
        self.assertEqual(graph.edges_count, 0)

    def test_missing_root_raises_io_error(self):
        with self.assertRaises(AnalysisIOError) as ctx:
            build_dependency_graph(os.path.join(self.temp_dir, "does-not-exist"))
        self.assertIsInstance(ctx.exception, IOError)

    def test_file_as_root_raises_io_error(self):
        with self.assertRaises(AnalysisIOError):
            build_dependency_graph(str(self.src / "a.ts"))


if __name__ == '__main__':
    unittest.main()
