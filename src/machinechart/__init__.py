"""machinechart - derive statecharts from state machines written as plain classes.

Transitions are annotated in place with the primitives ``transition_to``,
``describe``, ``guarded``, ``action`` and ``invoke``; the statechart is then
recovered from live objects or, without executing anything, from source.
"""

__version__ = "0.1.0"

from .annotations import (
    ActionRef,
    GuardRef,
    InvokeSpec,
    MetadataLedger,
    TransitionMeta,
    action,
    describe,
    get_ledger,
    get_transition_metadata,
    guarded,
    invoke,
    is_transition,
    transition_to,
)
from .config import ChartConfig, ExtractionConfig, MachineConfig, SingleStateConfig
from .exceptions import (
    ChartConfigurationError,
    MachineChartException,
    MixedExtractionModeError,
    SourceNotFoundError,
    SourceParseError,
)
from .extraction import (
    AssemblyResult,
    ExtractionMode,
    StatechartAssembler,
    analyze_declarations,
    analyze_live_states,
    extract_from_declarations,
    extract_from_live_states,
    extract_machines,
    extract_single,
    load_source,
)
from .formatters import format_chart, render_mermaid, write_chart
from .identity import DynamicIdentityResolver, IdentityResolver, StaticIdentityResolver
from .models import Statechart, StateNode
from .validation import Advisory, AdvisoryKind, validate_statechart

__all__ = [
    # Primitives
    "transition_to",
    "describe",
    "guarded",
    "action",
    "invoke",
    "is_transition",
    "get_transition_metadata",
    # Metadata
    "GuardRef",
    "ActionRef",
    "InvokeSpec",
    "TransitionMeta",
    "MetadataLedger",
    "get_ledger",
    # Identity
    "IdentityResolver",
    "DynamicIdentityResolver",
    "StaticIdentityResolver",
    # Extraction
    "extract_from_live_states",
    "extract_from_declarations",
    "extract_single",
    "extract_machines",
    "analyze_live_states",
    "analyze_declarations",
    "load_source",
    "StatechartAssembler",
    "AssemblyResult",
    "ExtractionMode",
    # Documents
    "Statechart",
    "StateNode",
    "render_mermaid",
    "format_chart",
    "write_chart",
    # Validation
    "Advisory",
    "AdvisoryKind",
    "validate_statechart",
    # Configuration
    "ChartConfig",
    "SingleStateConfig",
    "MachineConfig",
    "ExtractionConfig",
    # Exceptions
    "MachineChartException",
    "ChartConfigurationError",
    "MixedExtractionModeError",
    "SourceNotFoundError",
    "SourceParseError",
]
