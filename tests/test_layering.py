"""
tests/test_layering.py
Enforce architectural layering:
  utils      → may NOT import core, reporting, main
  core       → may NOT import reporting, main
  reporting  → may NOT import core, main

Run: pytest tests/test_layering.py -v
"""

import sys, os, ast
from pathlib import Path

ROOT = Path(__file__).parent.parent
PKG = ROOT / "netscout"
sys.path.insert(0, str(ROOT))


def get_imports(filepath: Path) -> list[str]:
    """Extract all imported module names from a Python file."""
    tree = ast.parse(filepath.read_text(encoding="utf-8"))
    imports = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                imports.append(alias.name)
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                imports.append(node.module)
    return imports


def subpackage_of(module: str) -> str | None:
    """'netscout.core.probe' → 'core'; None for anything outside netscout."""
    parts = module.split(".")
    if parts[0] != "netscout" or len(parts) < 2:
        return None
    return parts[1]


class TestLayering:
    def _check(self, package: str, forbidden: set[str]):
        pkg_dir = PKG / package
        assert pkg_dir.is_dir(), f"missing package netscout.{package}"
        for pyfile in pkg_dir.rglob("*.py"):
            for imp in get_imports(pyfile):
                sub = subpackage_of(imp)
                assert sub not in forbidden, (
                    f"LAYERING VIOLATION in {pyfile.relative_to(ROOT)}: "
                    f"'{package}' imports '{imp}' — "
                    f"forbidden: {sorted(forbidden)}"
                )

    def test_utils_is_a_leaf(self):
        self._check("utils", {"core", "reporting", "main"})

    def test_core_does_not_import_reporting(self):
        self._check("core", {"reporting", "main"})

    def test_reporting_does_not_import_core(self):
        self._check("reporting", {"core", "main"})

    def test_no_third_party_web_stack(self):
        for pyfile in PKG.rglob("*.py"):
            for imp in get_imports(pyfile):
                assert imp.split(".")[0] not in {"flask", "requests", "sqlite3"}, (
                    f"{pyfile.relative_to(ROOT)} imports {imp}"
                )


if __name__ == "__main__":
    import pytest
    pytest.main([__file__, "-v"])
