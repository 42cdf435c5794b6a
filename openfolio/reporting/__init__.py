"""Reporting helpers (text charts)."""
from .charts import render_bar_chart, sample_points, chart_scale

__all__ = ["render_bar_chart", "sample_points", "chart_scale"]
