from __future__ import annotations

import numpy as np
from pygame.math import Vector2


class FieldGrid:
    """Non-negative scalar field sampled on a ``dx`` by ``dy`` lattice over the domain.

    Values are indexed ``[x, y]``. Each axis is either periodic or closed
    (zero flux through the edge).
    """

    def __init__(
        self,
        dx: int,
        dy: int,
        left: float = 0.0,
        right: float = 1.0,
        bottom: float = 0.0,
        top: float = 1.0,
        wrap_x: bool = False,
        wrap_y: bool = False,
        value: float = 0.0,
    ) -> None:
        self._values = np.full((max(1, int(dx)), max(1, int(dy))), float(value), dtype=float)
        self._left = left
        self._right = right
        self._bottom = bottom
        self._top = top
        self.wrap_x = wrap_x
        self.wrap_y = wrap_y

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def shape(self) -> tuple[int, int]:
        return self._values.shape

    @property
    def total(self) -> float:
        return float(self._values.sum())

    def set_dims(self, dx: int, dy: int) -> None:
        self._values = np.zeros((max(1, int(dx)), max(1, int(dy))), dtype=float)

    def set_bounds(self, left: float, right: float, bottom: float, top: float) -> None:
        self._left = left
        self._right = right
        self._bottom = bottom
        self._top = top

    def fill(self, value: float) -> None:
        self._values.fill(max(0.0, float(value)))

    def at(self, x: int, y: int) -> float:
        return float(self._values[x, y])

    def set(self, x: int, y: int, value: float) -> None:
        self._values[x, y] = value

    def cell_of(self, position: Vector2) -> tuple[int, int]:
        nx, ny = self._values.shape
        ix = int((position.x - self._left) / (self._right - self._left) * nx)
        iy = int((position.y - self._bottom) / (self._top - self._bottom) * ny)
        return (min(nx - 1, max(0, ix)), min(ny - 1, max(0, iy)))

    def sample(self, position: Vector2) -> float:
        return float(self._values[self.cell_of(position)])

    def laplacian(self) -> np.ndarray:
        # Closed axes replicate the edge cell, so no flux leaves through them.
        padded = np.pad(
            self._values,
            ((1, 1), (0, 0)),
            mode="wrap" if self.wrap_x else "edge",
        )
        padded = np.pad(padded, ((0, 0), (1, 1)), mode="wrap" if self.wrap_y else "edge")
        center = padded[1:-1, 1:-1]
        return (
            padded[:-2, 1:-1]
            + padded[2:, 1:-1]
            + padded[1:-1, :-2]
            + padded[1:-1, 2:]
            - 4.0 * center
        )

    def diffuse(self, epsilon: float, diffusion: float, source: float = 0.0) -> None:
        """Explicit Euler step ``f += eps * (D * lap(f) + source)`` followed by a clamp at zero."""

        self._values += epsilon * (diffusion * self.laplacian() + source)
        np.clip(self._values, 0.0, None, out=self._values)
