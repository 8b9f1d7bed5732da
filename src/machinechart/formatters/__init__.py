"""Output formatters for statecharts."""

from .mermaid import render_mermaid
from .output import OUTPUT_FORMATS, format_chart, write_chart

__all__ = ["render_mermaid", "format_chart", "write_chart", "OUTPUT_FORMATS"]
