"""Statechart assembler - batch state nodes into one statechart document.

The assembler is a one-shot transform: it takes the chart configuration and a
mapping from state name to source, builds one StateNode per entry with the
graph builder selected by its mode, and returns the document together with
any advisories. All sources of one run must match the mode; live instances
and class declarations cannot be mixed in one chart.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import ValidationError

from ..annotations.ledger import MetadataLedger
from ..annotations.metadata import TransitionMeta
from ..config import ChartConfig, get_settings
from ..exceptions import ChartConfigurationError, MixedExtractionModeError
from ..logging import get_logger
from ..models.statechart import Statechart, StateNode
from ..validation import Advisory, invoke_with_target_advisory, validate_statechart
from .dynamic_builder import iter_transitions as iter_dynamic_transitions
from .source import DeclaredState
from .state_node import shape_state_node
from .static_builder import StaticStateAnalyzer

logger = get_logger(__name__)


class ExtractionMode(Enum):
    """Where transition metadata is read from."""

    DYNAMIC = "dynamic"  # Live objects and the metadata ledger
    STATIC = "static"  # Parsed class declarations


@dataclass(frozen=True)
class AssemblyResult:
    """A finished statechart and the advisories raised while building it."""

    chart: Statechart
    advisories: tuple[Advisory, ...] = ()


def coerce_chart_config(config: Any) -> ChartConfig:
    """Validate a chart configuration.

    Args:
        config: A ChartConfig or a mapping with ``id``, ``initial`` and
               optional ``description``

    Raises:
        ChartConfigurationError: If ``id`` or ``initial`` is missing or empty
    """
    if isinstance(config, ChartConfig):
        return config
    if not isinstance(config, Mapping):
        raise ChartConfigurationError(
            f"expected a mapping or ChartConfig, got {type(config).__name__}"
        )
    try:
        return ChartConfig.model_validate(dict(config))
    except ValidationError as e:
        missing = sorted({str(error["loc"][0]) for error in e.errors() if error["loc"]})
        raise ChartConfigurationError(
            f"'id' and 'initial' must be non-empty strings (problem fields: {missing})",
            fields=missing,
        ) from e


class StatechartAssembler:
    """Assemble a statechart from state sources of a single extraction mode.

    Args:
        mode: Extraction mode used for every state of the run
        ledger: Ledger read by the dynamic builder. Defaults to the
               process-wide ledger.
        validate: Run the advisory validation pass. Defaults to the
                 ``validate_output`` setting.
    """

    def __init__(
        self,
        mode: ExtractionMode,
        ledger: MetadataLedger | None = None,
        validate: bool | None = None,
    ) -> None:
        self.mode = mode
        self.ledger = ledger
        self.validate = get_settings().validate_output if validate is None else validate
        self._analyzers: dict[int, StaticStateAnalyzer] = {}

    def assemble(
        self,
        config: Any,
        sources: Mapping[str, Any],
        advisories: Iterable[Advisory] = (),
    ) -> AssemblyResult:
        """Build the statechart for ``sources``.

        Args:
            config: Chart configuration (``id``, ``initial``, ``description``)
            sources: State name to live object (dynamic) or DeclaredState (static)
            advisories: Advisories already collected by the caller, reported
                       together with the ones found here

        Returns:
            AssemblyResult with the document and every advisory

        Raises:
            ChartConfigurationError: If the configuration lacks ``id``/``initial``
            MixedExtractionModeError: If a source does not match the mode
        """
        chart_config = coerce_chart_config(config)
        for name, source in sources.items():
            self._check_mode(str(name), source)

        found = list(advisories)
        states: dict[str, StateNode] = {}

        for name, source in sources.items():
            state_name = str(name)
            transitions = list(self._transitions(source))
            for event, meta in transitions:
                if meta.invoke is not None and meta.target is not None:
                    found.append(invoke_with_target_advisory(state_name, event))
            states[state_name] = shape_state_node(transitions)

        chart = Statechart(
            id=chart_config.id,
            initial=chart_config.initial,
            description=chart_config.description,
            states=states,
        )

        if self.validate:
            found.extend(validate_statechart(chart))

        for advisory in found:
            advisory.log()

        logger.info(
            "statechart_assembled",
            chart_id=chart.id,
            mode=self.mode.value,
            states=len(states),
            advisories=len(found),
        )
        return AssemblyResult(chart=chart, advisories=tuple(found))

    def _check_mode(self, name: str, source: Any) -> None:
        is_declaration = isinstance(source, DeclaredState)
        if is_declaration != (self.mode is ExtractionMode.STATIC):
            raise MixedExtractionModeError(
                name, self.mode.value, source_type=type(source).__name__
            )

    def _transitions(self, source: Any) -> Iterator[tuple[str, TransitionMeta]]:
        if self.mode is ExtractionMode.DYNAMIC:
            return iter_dynamic_transitions(source, self.ledger)

        # One analyzer per parsed module
        analyzer = self._analyzers.get(id(source.module))
        if analyzer is None or analyzer.module is not source.module:
            analyzer = StaticStateAnalyzer(source.module)
            self._analyzers[id(source.module)] = analyzer
        return analyzer.iter_transitions(source)
