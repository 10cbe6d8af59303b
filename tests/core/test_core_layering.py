"""
Tests for core layering - core/ stays engine-agnostic.
"""

import ast
from pathlib import Path

import pytest

CORE_DIR = Path(__file__).resolve().parents[2] / "core"
FORBIDDEN_ROOTS = ("engines", "integration", "ai")


def _imported_roots(path: Path):
    tree = ast.parse(path.read_text(encoding="utf-8"))
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield alias.name.split(".")[0]
        elif isinstance(node, ast.ImportFrom) and node.module and node.level == 0:
            yield node.module.split(".")[0]


CORE_MODULES = sorted(CORE_DIR.rglob("*.py"))


class TestCoreLayering:
    def test_core_modules_found(self):
        assert CORE_MODULES

    @pytest.mark.parametrize("path", CORE_MODULES, ids=lambda p: str(p.relative_to(CORE_DIR)))
    def test_core_does_not_import_outer_layers(self, path):
        roots = set(_imported_roots(path))
        assert not roots & set(FORBIDDEN_ROOTS)
