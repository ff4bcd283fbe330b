"""
Coordinate system shared by the dashboard and goal-detail charts.

Canvas space: origin at the top-left corner, y grows downwards. Values are
mapped linearly onto the padded plot area, so higher values sit nearer the top.
"""
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple
import math


@dataclass(frozen=True)
class ChartGeometry:
    width: float = 320
    height: float = 120
    padding_x: float = 16
    padding_y: float = 12

    @property
    def plot_width(self) -> float:
        return self.width - 2 * self.padding_x

    @property
    def plot_height(self) -> float:
        return self.height - 2 * self.padding_y

    @property
    def top(self) -> float:
        return self.padding_y

    @property
    def bottom(self) -> float:
        return self.height - self.padding_y


DEFAULT_GEOMETRY = ChartGeometry()


def is_finite_number(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


@dataclass(frozen=True)
class LinearScale:
    scale_min: float
    scale_max: float
    geometry: ChartGeometry = DEFAULT_GEOMETRY

    @classmethod
    def fit(cls, values: Sequence[float], target: Optional[float] = None,
            geometry: ChartGeometry = DEFAULT_GEOMETRY) -> "LinearScale":
        """Span the values, stretched to include the target when there is one."""
        scale_min = min(values)
        scale_max = max(values)
        if is_finite_number(target):
            scale_min = min(scale_min, target)
            scale_max = max(scale_max, target)
        return cls(scale_min=scale_min, scale_max=scale_max, geometry=geometry)

    @property
    def value_range(self) -> float:
        # Flat data would divide by zero
        return (self.scale_max - self.scale_min) or 1

    def y(self, value: float) -> float:
        g = self.geometry
        return g.height - g.padding_y - ((value - self.scale_min) / self.value_range) * g.plot_height

    def x(self, index: int, count: int) -> float:
        g = self.geometry
        step = g.plot_width / (count - 1) if count > 1 else 0
        return g.padding_x + index * step

    def contains_y(self, y: float) -> bool:
        return self.geometry.top <= y <= self.geometry.bottom

    def project(self, values: Sequence[float]) -> Iterator[Tuple[float, float]]:
        """Yield one (x, y) pair per value. Each call starts over."""
        count = len(values)
        for index, value in enumerate(values):
            yield self.x(index, count), self.y(value)
