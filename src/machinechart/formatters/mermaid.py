"""Render statecharts as Mermaid ``stateDiagram-v2`` diagrams."""

from ..models.statechart import Statechart


def render_mermaid(chart: Statechart) -> str:
    """Render a chart as a Mermaid state diagram.

    Event transitions are labeled ``event`` or ``event: description``;
    invoke outcomes are labeled ``<src>.done`` and ``<src>.error``.

    Args:
        chart: The statechart to render

    Returns:
        Diagram source text
    """
    lines = ["stateDiagram-v2", f"  [*] --> {chart.initial}"]

    for state_name, node in chart.states.items():
        if not node.on and not node.invoke:
            lines.append(f"  {state_name}")
            continue

        for event, transition in node.on.items():
            label = f"{event}: {transition.description}" if transition.description else event
            if transition.cond:
                label += f" [{transition.cond}]"
            lines.append(f"  {state_name} --> {transition.target} : {label}")

        for invocation in node.invoke or []:
            lines.append(f"  {state_name} --> {invocation.on_done.target} : {invocation.src}.done")
            lines.append(
                f"  {state_name} --> {invocation.on_error.target} : {invocation.src}.error"
            )

    return "\n".join(lines)
