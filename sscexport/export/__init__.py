from .ssc import ChartLine, build_chart_lines, format_number, render_chart, write_chart

__all__ = [
    "ChartLine",
    "build_chart_lines",
    "format_number",
    "render_chart",
    "write_chart",
]
