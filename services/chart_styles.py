"""Fixed styling tables for the financial charts."""

from __future__ import annotations

from typing import Any, Dict, Sequence

PRIMARY_COLORS: Sequence[str] = ("#e5c07b", "#d4a373", "#c2956a", "#b08968", "#a67c5a", "#9c6f4c")
SECONDARY_COLORS: Sequence[str] = ("#3b82f6", "#10b981", "#f59e0b", "#ef4444", "#8b5cf6", "#06b6d4")

GRADIENTS: Dict[str, Dict[str, str]] = {
    "blue": {"start": "#3b82f6", "end": "#1d4ed8"},
    "green": {"start": "#10b981", "end": "#047857"},
    "yellow": {"start": "#f59e0b", "end": "#d97706"},
    "red": {"start": "#ef4444", "end": "#dc2626"},
    "purple": {"start": "#8b5cf6", "end": "#7c3aed"},
    "gold": {"start": "#e5c07b", "end": "#d4a373"},
}

CHART_CONFIG: Dict[str, Any] = {
    "margin": {"top": 20, "right": 30, "left": 20, "bottom": 20},
    "height": 300,
    "compactHeight": 200,
    "grid": {"strokeDasharray": "3 3", "stroke": "#374151", "strokeOpacity": 0.3, "horizontal": True, "vertical": False},
    "axis": {"axisLine": False, "tickLine": False, "tick": {"fill": "#9CA3AF", "fontSize": 11, "fontWeight": 500}},
}

# metric key -> (label, gradient)
METRIC_SERIES = {
    "revenue": ("Revenue", "gold"),
    "operating_profit": ("Operating profit", "blue"),
    "net_profit": ("Net profit", "green"),
    "total_assets": ("Total assets", "purple"),
    "equity": ("Equity", "yellow"),
    "employees": ("Employees", "red"),
}


def series_style(metric: str, index: int = 0) -> Dict[str, Any]:
    _, gradient = METRIC_SERIES.get(metric, (metric, None))
    if gradient is None:
        color = SECONDARY_COLORS[index % len(SECONDARY_COLORS)]
        return {"color": color, "gradient": {"start": color, "end": color}}
    colors = GRADIENTS[gradient]
    return {"color": colors["start"], "gradient": dict(colors)}


__all__ = ["CHART_CONFIG", "GRADIENTS", "METRIC_SERIES", "PRIMARY_COLORS", "SECONDARY_COLORS", "series_style"]
