"""
Text rendering of session snapshots.

Cube boards print as six labeled face grids; sphere boards print their
cells in index order.
"""
from typing import Dict, List, Tuple

from surface import CubeMeta, Topology
from surface.cube import FACE_NAMES

from .cell import CellView
from .session import SessionSnapshot


SPHERE_ROW_WIDTH = 32


def cell_symbol(cell: CellView) -> str:
    """Single character for a cell: . hidden, F flag, * mine, digit count."""
    if cell.is_flagged:
        return "F"
    if cell.is_hidden:
        return "."
    if cell.is_mine:
        return "*"
    if cell.neighbor_count == 0:
        return " "
    return str(cell.neighbor_count)


def render_ansi(snapshot: SessionSnapshot) -> str:
    """Render a snapshot as plain text."""
    header = (
        f"{snapshot.topology.value} {snapshot.config.label} | "
        f"{snapshot.status.value} | "
        f"mines {snapshot.mine_count} flags {snapshot.flagged_count} | "
        f"revealed {snapshot.revealed_count}/{snapshot.total_cells - snapshot.mine_count}"
    )
    if snapshot.topology is Topology.CUBE:
        body = _render_cube(snapshot)
    else:
        body = _render_sphere(snapshot)
    return "\n".join([header] + body)


def _render_cube(snapshot: SessionSnapshot) -> List[str]:
    """One grid per face, v rows from top to bottom, u columns."""
    faces: Dict[int, Dict[Tuple[int, int], CellView]] = {}
    size = 0
    for cell in snapshot.cells.values():
        meta = cell.meta
        if not isinstance(meta, CubeMeta):
            continue
        faces.setdefault(meta.face, {})[(meta.u, meta.v)] = cell
        size = meta.size

    lines = []
    for face in sorted(faces):
        grid = faces[face]
        lines.append(f"[{FACE_NAMES[face]}]")
        for v in reversed(range(size)):
            lines.append(" ".join(cell_symbol(grid[(u, v)]) for u in range(size)))
    return lines


def _render_sphere(snapshot: SessionSnapshot) -> List[str]:
    """Cells in generation order, fixed number per line."""
    symbols = [cell_symbol(cell) for cell in snapshot.cells.values()]
    return [
        f"{start:5d} " + " ".join(symbols[start:start + SPHERE_ROW_WIDTH])
        for start in range(0, len(symbols), SPHERE_ROW_WIDTH)
    ]
