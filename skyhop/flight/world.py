"""Static world geometry: axis-aligned boxes and the city generator."""

from dataclasses import dataclass
from typing import Iterable, Iterator
import math

import numpy as np

from .config import FlightConfig


@dataclass(frozen=True)
class Box:
    """An axis-aligned box given by its min and max corners (meters)."""

    min_corner: tuple[float, float, float]
    max_corner: tuple[float, float, float]

    def __post_init__(self):
        if any(lo > hi for lo, hi in zip(self.min_corner, self.max_corner)):
            raise ValueError(f"inverted box: min {self.min_corner} > max {self.max_corner}")

    @classmethod
    def around(cls, center, half_extent: float) -> "Box":
        """Cube centered on a point."""
        x, y, z = (float(c) for c in center)
        h = float(half_extent)
        return cls((x - h, y - h, z - h), (x + h, y + h, z + h))

    @property
    def center(self) -> tuple[float, float, float]:
        return tuple((lo + hi) / 2.0 for lo, hi in zip(self.min_corner, self.max_corner))

    def intersects(self, other: "Box") -> bool:
        """Overlap test; touching faces count as intersecting."""
        for a_lo, a_hi, b_lo, b_hi in zip(self.min_corner, self.max_corner, other.min_corner, other.max_corner):
            if a_hi < b_lo or a_lo > b_hi:
                return False
        return True


class ObstacleSet:
    """
    Immutable collection of obstacle boxes.

    Queries are a linear scan over every box. Fine for the hundred or so
    buildings a city holds; a spatial index could replace it behind the
    same methods.
    """

    def __init__(self, boxes: Iterable[Box] = ()):
        self._boxes = tuple(boxes)

    def __iter__(self) -> Iterator[Box]:
        return iter(self._boxes)

    def __len__(self) -> int:
        return len(self._boxes)

    @property
    def boxes(self) -> tuple[Box, ...]:
        return self._boxes

    def first_hit(self, box: Box) -> Box | None:
        """First obstacle intersecting box, or None."""
        for obstacle in self._boxes:
            if obstacle.intersects(box):
                return obstacle
        return None

    def intersects(self, box: Box) -> bool:
        return self.first_hit(box) is not None

    def bounds(self) -> Box | None:
        """Smallest box enclosing every obstacle."""
        if not self._boxes:
            return None
        mins = np.min([b.min_corner for b in self._boxes], axis=0)
        maxs = np.max([b.max_corner for b in self._boxes], axis=0)
        return Box(tuple(float(v) for v in mins), tuple(float(v) for v in maxs))


def generate_city(rng: np.random.Generator, config: FlightConfig) -> ObstacleSet:
    """
    Place up to config.obstacle_count buildings on a jittered grid.

    Buildings stand on the ground (y = 0), never overlap each other, and
    keep clear of the spawn column so the first tick is not a crash.
    """
    if config.obstacle_count <= 0:
        return ObstacleSet()

    extent = config.city_extent
    block = config.city_block
    cells = [
        (x, z)
        for x in np.arange(-extent, extent + 1e-9, block)
        for z in np.arange(-extent, extent + 1e-9, block)
    ]
    order = rng.permutation(len(cells))

    spawn_x, _, spawn_z = config.spawn_position
    boxes: list[Box] = []
    for idx in order:
        if len(boxes) >= config.obstacle_count:
            break
        cx, cz = (float(v) for v in cells[idx])
        width = rng.uniform(*config.building_width)
        depth = rng.uniform(*config.building_width)
        height = rng.uniform(*config.building_height)

        # Jitter inside the cell without crossing into the neighbour's footprint
        slack = max(0.0, (block - max(width, depth)) / 2.0)
        cx += rng.uniform(-slack, slack)
        cz += rng.uniform(-slack, slack)

        if math.hypot(cx - spawn_x, cz - spawn_z) < config.spawn_clearance + max(width, depth) / 2.0:
            continue

        candidate = Box(
            (cx - width / 2.0, 0.0, cz - depth / 2.0),
            (cx + width / 2.0, height, cz + depth / 2.0),
        )
        if any(candidate.intersects(b) for b in boxes):
            continue
        boxes.append(candidate)

    return ObstacleSet(boxes)
