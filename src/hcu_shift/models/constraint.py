"""Constraint configuration models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ParameterType(str, Enum):
    """Types of constraint parameters."""

    INT = "int"
    FLOAT = "float"
    BOOL = "bool"


class ParameterDef(BaseModel):
    """Definition of a tunable penalty parameter."""

    name: str
    display_name: str
    param_type: ParameterType
    default: Any
    min_value: float | None = None
    max_value: float | None = None
    description: str = ""


class ConstraintConfig(BaseModel):
    """A single constraint configuration with user-specified parameters."""

    template_id: str
    enabled: bool = True
    parameters: dict[str, Any] = Field(default_factory=dict)


class ConstraintSet(BaseModel):
    """A named collection of constraint configurations (a scoring profile)."""

    name: str = "selection"
    constraints: list[ConstraintConfig] = Field(default_factory=list)

    @classmethod
    def selection_default(cls) -> ConstraintSet:
        """Objective used to rank Phase 1 candidates."""
        return cls(
            name="selection",
            constraints=[
                ConstraintConfig(
                    template_id="night_staffing_match",
                    parameters={"penalty_per_missing": 500.0, "penalty_per_extra": 300.0},
                ),
                ConstraintConfig(
                    template_id="day_staffing_match",
                    parameters={"weight_missing": 20.0, "weight_extra": 10.0},
                ),
                ConstraintConfig(
                    template_id="days_off_cap",
                    parameters={"penalty_weight": 50.0},
                ),
                ConstraintConfig(
                    template_id="max_consecutive_work",
                    parameters={"penalty_weight": 100.0},
                ),
                ConstraintConfig(
                    template_id="night_chain_integrity",
                    parameters={"penalty_per_break": 100.0},
                ),
                ConstraintConfig(
                    template_id="night_cap",
                    parameters={"penalty_per_excess": 150.0, "penalty_per_forbidden": 200.0},
                ),
            ],
        )

    @classmethod
    def annealing_default(cls) -> ConstraintSet:
        """Cost minimized by the Phase 2 annealer."""
        return cls(
            name="annealing",
            constraints=[
                ConstraintConfig(
                    template_id="day_staffing_variance",
                    parameters={"penalty_weight": 10.0},
                ),
                ConstraintConfig(
                    template_id="day_staffing_match",
                    parameters={"weight_missing": 20.0, "weight_extra": 10.0},
                ),
                ConstraintConfig(
                    template_id="max_consecutive_work",
                    parameters={"penalty_weight": 100.0},
                ),
                ConstraintConfig(
                    template_id="days_off_cap",
                    parameters={"penalty_weight": 50.0},
                ),
            ],
        )
