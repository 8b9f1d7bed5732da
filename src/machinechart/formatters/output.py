"""Chart output in the supported formats.

- json: the statechart document
- mermaid: a ``stateDiagram-v2`` diagram
"""

from pathlib import Path

from ..config import get_settings
from ..logging import get_logger
from ..models.statechart import Statechart
from .mermaid import render_mermaid

logger = get_logger(__name__)

OUTPUT_FORMATS = ("json", "mermaid")


def format_chart(chart: Statechart, format_type: str = "json", indent: int | None = None) -> str:
    """Format a chart in the specified format.

    Args:
        chart: The statechart to format
        format_type: Output format ("json" or "mermaid")
        indent: JSON indentation. Defaults to the ``json_indent`` setting.

    Returns:
        Formatted string output

    Raises:
        ValueError: If format_type is not recognized
    """
    if format_type == "json":
        return chart.to_json(indent=get_settings().json_indent if indent is None else indent)
    elif format_type == "mermaid":
        return render_mermaid(chart)
    else:
        raise ValueError(f"Unknown format type: {format_type}")


def write_chart(chart: Statechart, path: str | Path, format_type: str = "json") -> Path:
    """Write a formatted chart to a file, creating parent directories.

    Returns:
        The path written
    """
    output_path = Path(path)
    text = format_chart(chart, format_type)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text + "\n", encoding="utf-8")

    logger.info("chart_written", chart_id=chart.id, path=str(output_path), format=format_type)
    return output_path
