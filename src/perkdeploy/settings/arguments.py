"""
Constructor-argument files.

Two formats are accepted:

* ``.json``: a top-level array, e.g. ``["PERK", "PRK", "10000000000000"]``
* ``.py``: a module with a literal ``constructor_args = [...]`` assignment.
  The file is parsed, never imported or executed.
"""

from __future__ import annotations

import ast
from pathlib import Path
from typing import Any

from ..errors import ConfigError
from .schemas import load_json

ARGS_VARIABLE = "constructor_args"


def load_constructor_args(path: Path) -> list[Any]:
    if not path.exists():
        raise ConfigError(f"Constructor arguments file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        args = load_json(path)
    elif suffix == ".py":
        args = _literal_from_module(path)
    else:
        raise ConfigError(f"Unsupported constructor arguments file type: {path.name} (use .json or .py)")

    if not isinstance(args, (list, tuple)):
        raise ConfigError(f"Constructor arguments in {path} must be a list, got {type(args).__name__}")
    return list(args)


def _literal_from_module(path: Path) -> Any:
    source = path.read_text(encoding="utf-8")
    try:
        tree = ast.parse(source, filename=str(path))
    except SyntaxError as exc:
        raise ConfigError(f"Cannot parse {path}: {exc}") from exc

    for node in tree.body:
        if isinstance(node, ast.Assign):
            targets = node.targets
        elif isinstance(node, ast.AnnAssign) and node.value is not None:
            targets = [node.target]
        else:
            continue
        if any(isinstance(t, ast.Name) and t.id == ARGS_VARIABLE for t in targets):
            try:
                return ast.literal_eval(node.value)
            except ValueError as exc:
                raise ConfigError(f"'{ARGS_VARIABLE}' in {path} must be a literal list") from exc

    raise ConfigError(f"No '{ARGS_VARIABLE}' assignment found in {path}")
