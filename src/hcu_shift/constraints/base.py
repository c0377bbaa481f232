"""Base classes for the constraint template system."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

from hcu_shift.models.constraint import ParameterDef
from hcu_shift.models.schedule import ScheduleContext


class PenaltyResult:
    """Result of a penalty function evaluation."""

    __slots__ = ("penalty", "details")

    def __init__(self, penalty: float = 0.0, details: str = "") -> None:
        self.penalty = penalty
        self.details = details


# Type alias for compiled penalty functions
PenaltyFunction = Callable[[ScheduleContext], PenaltyResult]


class ConstraintTemplate(ABC):
    """Abstract base class for constraint templates.

    A template declares its tunable weights as :class:`ParameterDef` entries
    and compiles them into a penalty function over a :class:`ScheduleContext`.
    Penalties are non-negative; zero means the rule holds.
    """

    @property
    @abstractmethod
    def template_id(self) -> str:
        """Unique identifier for this constraint template."""

    @property
    @abstractmethod
    def name_ja(self) -> str:
        """Japanese display name."""

    @property
    @abstractmethod
    def category(self) -> str:
        """Category: staffing, staff, chain."""

    @property
    @abstractmethod
    def parameters(self) -> list[ParameterDef]:
        """Parameter definitions with defaults."""

    @abstractmethod
    def compile(self, params: dict[str, Any]) -> PenaltyFunction:
        """Compile this template with given parameters into a penalty function."""

    def resolve_parameters(self, overrides: dict[str, Any]) -> dict[str, Any]:
        """Declared defaults, replaced by any matching ``overrides``."""
        return {p.name: overrides.get(p.name, p.default) for p in self.parameters}


@dataclass
class CompiledConstraint:
    """A constraint template compiled with specific parameters."""

    template_id: str
    name_ja: str
    penalty_fn: PenaltyFunction
    parameters: dict[str, Any]

    def evaluate(self, ctx: ScheduleContext) -> PenaltyResult:
        return self.penalty_fn(ctx)
