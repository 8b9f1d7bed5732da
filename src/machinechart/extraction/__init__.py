"""Extraction package.

Turns annotated state classes into statechart documents, either from live
objects (dynamic) or from parsed source (static).
"""

from .api import (
    analyze_declarations,
    analyze_live_states,
    extract_from_declarations,
    extract_from_live_states,
    extract_machines,
    extract_single,
)
from .assembler import AssemblyResult, ExtractionMode, StatechartAssembler, coerce_chart_config
from .dynamic_builder import build_dynamic_state_node, collect_members
from .source import Binding, DeclaredState, SourceModule, load_source
from .state_node import shape_state_node
from .static_builder import StaticStateAnalyzer, build_static_state_node
from .walker import StructuralWalker

__all__ = [
    # Entry points
    "extract_from_live_states",
    "extract_from_declarations",
    "extract_single",
    "extract_machines",
    "analyze_live_states",
    "analyze_declarations",
    # Assembly
    "StatechartAssembler",
    "AssemblyResult",
    "ExtractionMode",
    "coerce_chart_config",
    # Builders
    "build_dynamic_state_node",
    "build_static_state_node",
    "collect_members",
    "shape_state_node",
    "StaticStateAnalyzer",
    "StructuralWalker",
    # Sources
    "SourceModule",
    "DeclaredState",
    "Binding",
    "load_source",
]
