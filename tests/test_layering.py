"""
Import-direction checks between the package layers.
"""

from __future__ import annotations

import ast
from pathlib import Path

import pytest

PACKAGE_ROOT = Path(__file__).resolve().parent.parent / "safespace"


def _imported_modules(path: Path) -> set[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"))
    modules = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            modules.update(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            modules.add(node.module)
    return modules


@pytest.mark.parametrize("path", sorted((PACKAGE_ROOT / "domain").rglob("*.py")), ids=lambda p: p.name)
def test_domain_does_not_import_outer_layers(path):
    """Domain entities only import the standard library and other domain modules."""
    outer = ("safespace.application", "safespace.infrastructure", "safespace.api", "safespace.wiring", "safespace.core")
    assert not {m for m in _imported_modules(path) if m.startswith(outer)}


def test_booking_draft_lives_in_use_cases():
    """The draft validates against slot rules, so it sits beside the booking use case."""
    assert not (PACKAGE_ROOT / "domain" / "entities" / "booking_draft.py").exists()
    assert (PACKAGE_ROOT / "application" / "use_cases" / "booking_draft.py").exists()
