"""
Dependency-aware ordering of planned files.

Dependencies in a plan are loose path fragments ("Button", "utils/api"),
not exact paths, so a spec depends on every other spec whose path contains
one of its fragments. The ordering is best effort: cycles and fragments that
match nothing never fail, and every path is emitted at most once.
"""

from typing import List, Set

from appforge.schemas.generation import FileSpec


def _matches(spec: FileSpec, fragment: str) -> bool:
    return fragment in spec.path


def order_file_specs(specs: List[FileSpec]) -> List[FileSpec]:
    """
    Depth-first topological order over substring dependency matches.

    Specs are visited in plan order. Before a spec is emitted, each other spec
    matching one of its non-empty dependency fragments is visited first, also
    in plan order. A visited-set keyed by path breaks cycles and drops
    duplicate paths.
    """
    ordered: List[FileSpec] = []
    visited: Set[str] = set()

    def visit(spec: FileSpec) -> None:
        if spec.path in visited:
            return
        visited.add(spec.path)

        for fragment in spec.dependencies:
            fragment = (fragment or "").strip()
            if not fragment:
                continue
            for candidate in specs:
                if candidate.path != spec.path and _matches(candidate, fragment):
                    visit(candidate)

        ordered.append(spec)

    for spec in specs:
        visit(spec)

    return ordered
