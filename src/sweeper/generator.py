"""
Board generation.

Turns surface geometry into game cells with fresh ids and places mines.
"""
import logging
import uuid
from typing import Dict, List, Optional, Union

import numpy as np

from surface import BoardConfig, SurfaceCell, Topology, build_surface

from .cell import Cell
from .mines import place_mines


logger = logging.getLogger(__name__)

CellSet = Dict[str, Cell]


def cells_from_surface(surface: List[SurfaceCell]) -> CellSet:
    """
    Wrap surface cells into hidden, mine-free game cells.

    Ids are new uuid4 strings; insertion order follows the surface order.
    """
    ids = [str(uuid.uuid4()) for _ in surface]
    cells: CellSet = {}
    for cell_id, tile in zip(ids, surface):
        cells[cell_id] = Cell(
            id=cell_id,
            position=tile.position,
            normal=tile.normal,
            neighbors=tuple(ids[index] for index in tile.neighbors),
            meta=tile.meta,
            boundary=tile.boundary,
        )
    return cells


def generate_board(
    config: BoardConfig, rng: Optional[np.random.Generator] = None
) -> CellSet:
    """
    Build a playable board for a configuration.

    Args:
        config: Validated board configuration.
        rng: Random generator used for mine placement.

    Returns:
        Cells keyed by id, in generation order.
    """
    cells = cells_from_surface(build_surface(config))
    mines = place_mines(cells, config.density, rng)
    logger.debug(
        "Generated %s board: size=%s resolution=%d cells=%d mines=%d",
        config.topology.value, config.label, config.resolution_or_preset,
        len(cells), mines,
    )
    return cells


def generate(
    topology: Union[Topology, str],
    size_index: int,
    density: float,
    rng: Optional[np.random.Generator] = None,
) -> CellSet:
    """
    Generate a board from preset parameters.

    Geometry and adjacency depend only on topology and size index; only
    mine placement is random.

    Raises:
        ValueError: If the topology, size index or density is invalid.
    """
    return generate_board(BoardConfig(topology, size_index, density), rng)
