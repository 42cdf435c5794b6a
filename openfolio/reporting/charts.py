"""Text bar charts for value-over-time series."""
from __future__ import annotations
import math
from datetime import date
from typing import List, Optional, Sequence, Tuple

from ..config.schemas import ChartConfig

Point = Tuple[date, float]


def sample_points(points: Sequence[Point], max_lines: int) -> List[Point]:
    """Keep every ``ceil(n / max_lines)``-th point, starting with the first."""
    if not points:
        return []
    interval = math.ceil(len(points) / max_lines)
    return [points[i] for i in range(0, len(points), interval)]


def chart_scale(values: Sequence[float], max_stars: int) -> int:
    """USD per star so that the largest value spans at most ``max_stars`` stars."""
    peak = max(values, default=0.0)
    return max(1, math.ceil(peak / max_stars))


def render_bar_chart(points: Sequence[Point], config: Optional[ChartConfig] = None) -> str:
    """Render ``(date, value)`` points as ``"<date>: ****"`` rows plus a scale footer.

    Example (scale 3)::

        Jan 02 2024: ******************************
        Scale: * = 3 USD.
    """
    config = config or ChartConfig()
    sampled = sample_points(points, config.max_lines)
    scale = chart_scale([v for _, v in sampled], config.max_stars)

    lines = []
    for day, value in sampled:
        stars = max(0, int(value // scale))
        lines.append(f"{day.strftime(config.date_format)}: {'*' * stars}")
    lines.append(f"Scale: * = {scale} {config.currency}.")
    return "\n".join(lines) + "\n"
