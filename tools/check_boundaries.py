"""
Boundary Gate - Keep the ledger core free of outer surfaces

The herb_ledger package is the entity lifecycle core. It must not import
the REST servers, the CLI, or the web frameworks they use, so that it can
be bound to any ledger platform unchanged.

Usage:
    python tools/check_boundaries.py

Exit codes:
    0 - Core imports stay inside the boundary
    1 - A core module imports a forbidden package
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path
from typing import List, Tuple

CORE_PACKAGE = "herb_ledger"

# Top-level packages the core must never import
FORBIDDEN_IMPORTS = {"api", "cli", "flask", "flask_cors", "fastapi", "starlette", "uvicorn"}


def fail(msg: str) -> int:
    """Print error message and return failure code."""
    print(f"❌ boundary gate: {msg}", file=sys.stderr)
    return 1


def imported_roots(source: str) -> List[Tuple[int, str]]:
    """(line, top-level package) for every absolute import in source."""
    out = []
    for node in ast.walk(ast.parse(source)):
        if isinstance(node, ast.Import):
            out.extend((node.lineno, alias.name.split(".")[0]) for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
            out.append((node.lineno, node.module.split(".")[0]))
    return out


def violations(repo: Path) -> List[str]:
    found = []
    for path in sorted((repo / CORE_PACKAGE).rglob("*.py")):
        rel = path.relative_to(repo)
        for lineno, root in imported_roots(path.read_text(encoding="utf-8")):
            if root in FORBIDDEN_IMPORTS:
                found.append(f"{rel}:{lineno} imports {root}")
    return found


def main(repo: Path | None = None) -> int:
    """Run boundary verification checks."""
    # Find repo root (one level up from tools/)
    repo = repo or Path(__file__).resolve().parents[1]

    if not (repo / CORE_PACKAGE).is_dir():
        return fail(f"core package {CORE_PACKAGE!r} not found under {repo}")

    try:
        found = violations(repo)
    except (OSError, SyntaxError) as e:
        return fail(f"failed to scan {CORE_PACKAGE}: {e}")

    if found:
        return fail("core imports outer surfaces:\n  " + "\n  ".join(found))

    print("✅ boundary gate: OK")
    print(f"   - {CORE_PACKAGE} imports no server, CLI or web framework code")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
