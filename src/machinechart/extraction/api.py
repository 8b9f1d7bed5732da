"""Extraction entry points.

Dynamic extraction reads live state objects:

    chart = extract_from_live_states(
        {"LoggedOut": LoggedOut(), "LoggedIn": LoggedIn()},
        {"id": "auth", "initial": "LoggedOut"},
    )

Static extraction parses a source file without importing it:

    chart = extract_from_declarations(
        "machines/auth.py", ["LoggedOut", "LoggedIn"], {"id": "auth", "initial": "LoggedOut"}
    )

The ``extract_*`` functions return the document; the ``analyze_*`` variants
return the full ``AssemblyResult`` including advisories.
"""

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..annotations.ledger import MetadataLedger
from ..config import ExtractionConfig, SingleStateConfig
from ..exceptions import ChartConfigurationError
from ..formatters.output import write_chart
from ..identity import DynamicIdentityResolver
from ..logging import get_logger
from ..models.statechart import Statechart
from ..validation import Advisory, AdvisoryKind
from .assembler import AssemblyResult, ExtractionMode, StatechartAssembler
from .source import DeclaredState, SourceModule, load_source

logger = get_logger(__name__)


def analyze_live_states(
    states: Mapping[str, Any],
    config: Any,
    ledger: MetadataLedger | None = None,
    validate: bool | None = None,
) -> AssemblyResult:
    """Assemble a chart from live state objects and report advisories.

    Args:
        states: State name to state instance (or class, or mapping of callables)
        config: Chart configuration with ``id``, ``initial``, ``description``
        ledger: Ledger holding the transition metadata
        validate: Override the ``validate_output`` setting

    Returns:
        AssemblyResult
    """
    assembler = StatechartAssembler(ExtractionMode.DYNAMIC, ledger=ledger, validate=validate)
    return assembler.assemble(config, states)


def extract_from_live_states(
    states: Mapping[str, Any],
    config: Any,
    ledger: MetadataLedger | None = None,
) -> Statechart:
    """Extract a statechart from live state objects."""
    return analyze_live_states(states, config, ledger=ledger).chart


def analyze_declarations(
    source: str | Path | SourceModule,
    class_names: Iterable[str],
    config: Any,
    validate: bool | None = None,
) -> AssemblyResult:
    """Assemble a chart from class declarations and report advisories.

    Classes missing from the source are skipped with a
    ``missing-declaration`` advisory instead of failing the run.

    Args:
        source: Path to a Python file, source text, or a parsed SourceModule
        class_names: Names of the classes that represent states
        config: Chart configuration with ``id``, ``initial``, ``description``
        validate: Override the ``validate_output`` setting

    Returns:
        AssemblyResult

    Raises:
        SourceNotFoundError: If ``source`` names a file that does not exist
        SourceParseError: If the source is not valid Python
    """
    module = load_source(source)
    logger.info("analyzing_declarations", source=module.filename)

    declarations: dict[str, DeclaredState] = {}
    skipped: list[Advisory] = []

    for class_name in class_names:
        declaration = module.find_class(class_name)
        if declaration is None:
            skipped.append(
                Advisory(
                    AdvisoryKind.MISSING_DECLARATION,
                    f"Class '{class_name}' not found in '{module.filename}'. Skipping.",
                    state=class_name,
                )
            )
            continue
        declarations[class_name] = declaration

    assembler = StatechartAssembler(ExtractionMode.STATIC, validate=validate)
    return assembler.assemble(config, declarations, advisories=skipped)


def extract_from_declarations(
    source: str | Path | SourceModule,
    class_names: Iterable[str],
    config: Any,
) -> Statechart:
    """Extract a statechart by statically analyzing class declarations."""
    return analyze_declarations(source, class_names, config).chart


def extract_single(
    instance: Any,
    config: Any,
    ledger: MetadataLedger | None = None,
) -> Statechart:
    """Wrap a single state object as a whole chart.

    Args:
        instance: The state object
        config: SingleStateConfig or mapping with ``id`` and optional
               ``state_name``/``stateName`` and ``description``. The state
               name defaults to the instance's class name.
        ledger: Ledger holding the transition metadata

    Returns:
        A chart with one state that is also the initial state

    Raises:
        ChartConfigurationError: If ``id`` is missing or empty
    """
    if isinstance(config, SingleStateConfig):
        single = config
    else:
        try:
            single = SingleStateConfig.model_validate(dict(config))
        except (TypeError, ValueError, ValidationError) as e:
            raise ChartConfigurationError("'id' must be a non-empty string") from e

    state_name = single.state_name or DynamicIdentityResolver().resolve(type(instance)) or "State"
    chart_config = {"id": single.id, "initial": state_name, "description": single.description}
    return extract_from_live_states({state_name: instance}, chart_config, ledger=ledger)


def extract_machines(config: ExtractionConfig | Mapping[str, Any]) -> list[AssemblyResult]:
    """Statically extract every machine listed in a batch configuration.

    Machines with an ``output`` path also have their chart written there in
    the machine's ``format``.

    Args:
        config: ExtractionConfig or a mapping in its JSON shape

    Returns:
        One AssemblyResult per machine, in configuration order

    Raises:
        ChartConfigurationError: If the configuration is malformed
    """
    if not isinstance(config, ExtractionConfig):
        try:
            config = ExtractionConfig.model_validate(config)
        except ValidationError as e:
            raise ChartConfigurationError(f"invalid extraction configuration: {e}") from e

    results: list[AssemblyResult] = []
    for machine in config.machines:
        logger.info("extracting_machine", machine=machine.id, source=machine.input)
        result = analyze_declarations(
            machine.input,
            machine.classes,
            machine.chart_config(),
            validate=config.validate_output,
        )
        if machine.output:
            write_chart(result.chart, machine.output, machine.format)
        results.append(result)
    return results
