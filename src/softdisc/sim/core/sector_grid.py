from __future__ import annotations

import math
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Sequence, Tuple

from pygame.math import Vector2

if TYPE_CHECKING:
    from .particle import Particle


class SectorGrid:
    """Uniform partition of the domain into ``sectors_x * sectors_y`` buckets.

    Buckets are laid out row-major on a ``(sectors_x + 2) x (sectors_y + 2)``
    lattice whose outer ring stays empty, followed by one overflow bucket for
    particles outside the domain. Interior cell ``(x, y)`` (zero-based) lives
    at ``(y + 1) * (sectors_x + 2) + x + 1``.
    """

    def __init__(
        self,
        left: float,
        right: float,
        bottom: float,
        top: float,
        sectors_x: int = 10,
        sectors_y: int = 10,
        wrap_x: bool = False,
        wrap_y: bool = False,
    ) -> None:
        self._left = left
        self._right = right
        self._bottom = bottom
        self._top = top
        self._wrap_x = wrap_x
        self._wrap_y = wrap_y
        self._sectors_x = max(1, int(sectors_x))
        self._sectors_y = max(1, int(sectors_y))
        self._buckets: List[List["Particle"]] = []
        self._sector_of: Dict[int, int] = {}
        self._neighbor_cells: Dict[int, List[int]] = {}
        self._allocate()

    @property
    def sectors_x(self) -> int:
        return self._sectors_x

    @property
    def sectors_y(self) -> int:
        return self._sectors_y

    @property
    def overflow_index(self) -> int:
        return (self._sectors_x + 2) * (self._sectors_y + 2)

    @property
    def bucket_count(self) -> int:
        return len(self._buckets)

    @property
    def overflow(self) -> List["Particle"]:
        return self._buckets[self.overflow_index]

    def __len__(self) -> int:
        return len(self._sector_of)

    def __contains__(self, particle: "Particle") -> bool:
        return particle.id in self._sector_of

    def set_bounds(self, left: float, right: float, bottom: float, top: float) -> None:
        self._left = left
        self._right = right
        self._bottom = bottom
        self._top = top

    def set_wrap(self, wrap_x: bool, wrap_y: bool) -> None:
        if wrap_x == self._wrap_x and wrap_y == self._wrap_y:
            return
        self._wrap_x = wrap_x
        self._wrap_y = wrap_y
        self._build_neighbor_cells()

    def resize(self, sectors_x: int, sectors_y: int, particles: Iterable["Particle"]) -> None:
        self._sectors_x = max(1, int(sectors_x))
        self._sectors_y = max(1, int(sectors_y))
        self._allocate()
        for particle in particles:
            self.insert(particle)

    def clear(self) -> None:
        for bucket in self._buckets:
            bucket.clear()
        self._sector_of.clear()

    def cell_coords(self, position: Vector2) -> Tuple[int, int]:
        x_frac = (position.x - self._left) / (self._right - self._left)
        y_frac = (position.y - self._bottom) / (self._top - self._bottom)
        if not (math.isfinite(x_frac) and math.isfinite(y_frac)):
            return (-1, -1)
        return (math.floor(x_frac * self._sectors_x), math.floor(y_frac * self._sectors_y))

    def cell_index(self, position: Vector2) -> int:
        x, y = self.cell_coords(position)
        # On a wrapped axis the far edge is the same seam as the near one.
        if self._wrap_x and x == self._sectors_x and position.x <= self._right:
            x -= 1
        if self._wrap_y and y == self._sectors_y and position.y <= self._top:
            y -= 1
        if x < 0 or y < 0 or x >= self._sectors_x or y >= self._sectors_y:
            return self.overflow_index
        return (y + 1) * (self._sectors_x + 2) + x + 1

    def interior_index(self, x: int, y: int) -> int:
        return (y + 1) * (self._sectors_x + 2) + x + 1

    def bucket(self, index: int) -> List["Particle"]:
        return self._buckets[index]

    def cell(self, x: int, y: int) -> List["Particle"]:
        return self._buckets[self.interior_index(x, y)]

    def sector_of(self, particle: "Particle") -> int:
        return self._sector_of[particle.id]

    def insert(self, particle: "Particle") -> None:
        if particle.id in self._sector_of:
            self.remove(particle)
        index = self.cell_index(particle.position)
        self._buckets[index].append(particle)
        self._sector_of[particle.id] = index

    def remove(self, particle: "Particle") -> None:
        index = self._sector_of.pop(particle.id, None)
        if index is None:
            return
        bucket = self._buckets[index]
        for i, entry in enumerate(bucket):
            if entry is particle:
                del bucket[i]
                break

    def rebuild(self, particles: Iterable["Particle"]) -> int:
        """Re-file every particle whose cell changed; returns how many moved."""

        moved = 0
        sector_of = self._sector_of
        for particle in particles:
            index = self.cell_index(particle.position)
            current = sector_of.get(particle.id)
            if current == index:
                continue
            if current is not None:
                bucket = self._buckets[current]
                for i, entry in enumerate(bucket):
                    if entry is particle:
                        del bucket[i]
                        break
            self._buckets[index].append(particle)
            sector_of[particle.id] = index
            moved += 1
        return moved

    def iter_pairs(
        self, overflow_partners: Sequence["Particle"] | None = None
    ) -> Iterator[Tuple["Particle", "Particle"]]:
        """Yield ``(particle, neighbor)`` for every candidate contact.

        Each unordered pair comes out once from each side. When
        ``overflow_partners`` is given, overflow particles are paired with
        every particle in it as well.
        """

        buckets = self._buckets
        for index, cells in self._neighbor_cells.items():
            own = buckets[index]
            if not own:
                continue
            for particle in own:
                for cell in cells:
                    for other in buckets[cell]:
                        if other is not particle:
                            yield particle, other

        if overflow_partners is None:
            return
        overflow_index = self.overflow_index
        sector_of = self._sector_of
        for particle in list(buckets[overflow_index]):
            for other in overflow_partners:
                if other is particle:
                    continue
                yield particle, other
                if sector_of.get(other.id) != overflow_index:
                    yield other, particle

    def column_counts(self) -> List[int]:
        counts = []
        for x in range(self._sectors_x):
            counts.append(sum(len(self.cell(x, y)) for y in range(self._sectors_y)))
        return counts

    def neighbor_cells(self, x: int, y: int) -> List[int]:
        return list(self._neighbor_cells[self.interior_index(x, y)])

    def _allocate(self) -> None:
        self._buckets = [[] for _ in range((self._sectors_x + 2) * (self._sectors_y + 2) + 1)]
        self._sector_of.clear()
        self._build_neighbor_cells()

    def _build_neighbor_cells(self) -> None:
        sx = self._sectors_x
        sy = self._sectors_y
        stride = sx + 2
        self._neighbor_cells.clear()
        for y in range(1, sy + 1):
            for x in range(1, sx + 1):
                cells: List[int] = []
                for j in range(y - 1, y + 2):
                    row = j
                    if self._wrap_y and j == 0:
                        row = sy
                    elif self._wrap_y and j == sy + 1:
                        row = 1
                    for i in range(x - 1, x + 2):
                        col = i
                        if self._wrap_x and i == 0:
                            col = sx
                        elif self._wrap_x and i == sx + 1:
                            col = 1
                        index = row * stride + col
                        # Small periodic grids map several offsets to one cell.
                        if index not in cells:
                            cells.append(index)
                self._neighbor_cells[y * stride + x] = cells
