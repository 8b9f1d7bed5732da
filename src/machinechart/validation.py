"""Advisory validation of assembled statecharts.

Nothing here raises: every finding is returned as an ``Advisory`` and logged
as a warning, and the document itself is left untouched. Dangling targets in
particular are preserved in the chart; they are only reported.
"""

from dataclasses import dataclass
from enum import Enum

from .logging import get_logger
from .models.statechart import Statechart

logger = get_logger(__name__)


class AdvisoryKind(Enum):
    """Kind of non-fatal finding."""

    MISSING_DECLARATION = "missing-declaration"  # Named class absent from the source
    DANGLING_TARGET = "dangling-target"  # Target names no state in the chart
    MISSING_INITIAL = "missing-initial"  # Initial state absent from the chart
    INVOKE_WITH_TARGET = "invoke-with-target"  # Same member carries invoke and target
    DEGENERATE_NAME = "degenerate-name"  # Empty guard, action, src or target name


@dataclass(frozen=True)
class Advisory:
    """A non-fatal finding about an extraction run or its document."""

    kind: AdvisoryKind
    message: str
    state: str | None = None
    event: str | None = None

    def log(self) -> None:
        """Emit this advisory as a structured warning."""
        logger.warning(
            self.kind.value, message=self.message, state=self.state, transition=self.event
        )


def validate_statechart(chart: Statechart) -> list[Advisory]:
    """Check a chart for dangling references and degenerate metadata.

    Args:
        chart: The assembled chart

    Returns:
        Advisories in document order
    """
    advisories: list[Advisory] = []
    known_states = set(chart.states)

    if chart.initial not in known_states:
        advisories.append(
            Advisory(
                AdvisoryKind.MISSING_INITIAL,
                f"Initial state '{chart.initial}' is not one of the chart's states",
                state=chart.initial,
            )
        )

    for state_name, node in chart.states.items():
        for event, transition in node.on.items():
            if not transition.target:
                advisories.append(
                    Advisory(
                        AdvisoryKind.DEGENERATE_NAME,
                        f"Transition '{state_name}.{event}' has an empty target",
                        state=state_name,
                        event=event,
                    )
                )
            elif transition.target not in known_states:
                advisories.append(
                    Advisory(
                        AdvisoryKind.DANGLING_TARGET,
                        f"Transition '{state_name}.{event}' targets unknown state "
                        f"'{transition.target}'",
                        state=state_name,
                        event=event,
                    )
                )
            if transition.cond is not None and any(
                not name.strip() for name in transition.cond.split("&&")
            ):
                advisories.append(
                    Advisory(
                        AdvisoryKind.DEGENERATE_NAME,
                        f"Transition '{state_name}.{event}' has an unnamed guard",
                        state=state_name,
                        event=event,
                    )
                )
            if any(not name for name in transition.actions or []):
                advisories.append(
                    Advisory(
                        AdvisoryKind.DEGENERATE_NAME,
                        f"Transition '{state_name}.{event}' has an unnamed action",
                        state=state_name,
                        event=event,
                    )
                )

        for invocation in node.invoke or []:
            if not invocation.src:
                advisories.append(
                    Advisory(
                        AdvisoryKind.DEGENERATE_NAME,
                        f"State '{state_name}' invokes a service without a name",
                        state=state_name,
                    )
                )
            for outcome, ref in (("onDone", invocation.on_done), ("onError", invocation.on_error)):
                if ref.target not in known_states:
                    advisories.append(
                        Advisory(
                            AdvisoryKind.DANGLING_TARGET,
                            f"Invoke '{invocation.src}' in '{state_name}' has {outcome} "
                            f"target '{ref.target}' that is not a state of the chart",
                            state=state_name,
                            event=invocation.src,
                        )
                    )

    return advisories


def invoke_with_target_advisory(state_name: str, event: str) -> Advisory:
    """Advisory for a member that carries both an invoke spec and a target."""
    return Advisory(
        AdvisoryKind.INVOKE_WITH_TARGET,
        f"Transition '{state_name}.{event}' carries both an invoke spec and a target; "
        "it is emitted under both 'invoke' and 'on', which is an unsupported combination",
        state=state_name,
        event=event,
    )
