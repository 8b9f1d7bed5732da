"""Chart and batch-extraction configuration models.

These models are what callers hand to the extraction entry points. They accept
both snake_case field names and the camelCase keys used by JSON configuration
files (``initialState``, ``stateName``).
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChartConfig(BaseModel):
    """Chart-level configuration for one statechart."""

    id: str = Field(min_length=1)
    initial: str = Field(min_length=1)
    description: str | None = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class SingleStateConfig(BaseModel):
    """Configuration for wrapping a single state object as a whole chart."""

    id: str = Field(min_length=1)
    state_name: str | None = Field(None, alias="stateName")
    description: str | None = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class MachineConfig(BaseModel):
    """One machine to extract statically from a source file."""

    input: str
    classes: list[str] = Field(min_length=1)
    id: str = Field(min_length=1)
    initial_state: str = Field(min_length=1, alias="initialState")
    description: str | None = None
    output: str | None = None
    format: Literal["json", "mermaid"] = "json"

    model_config = ConfigDict(populate_by_name=True)

    def chart_config(self) -> ChartConfig:
        """Build the chart-level configuration for this machine."""
        return ChartConfig(id=self.id, initial=self.initial_state, description=self.description)


class ExtractionConfig(BaseModel):
    """Batch configuration listing several machines."""

    machines: list[MachineConfig] = Field(default_factory=list)
    validate_output: bool | None = Field(None, alias="validate")

    model_config = ConfigDict(populate_by_name=True)
