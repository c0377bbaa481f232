"""Constraint registry - manages all available constraint templates."""

from __future__ import annotations

from hcu_shift.constraints.base import CompiledConstraint, ConstraintTemplate
from hcu_shift.models.constraint import ConstraintConfig, ConstraintSet


class ConstraintRegistry:
    """Registry of all available constraint templates."""

    def __init__(self) -> None:
        self._templates: dict[str, ConstraintTemplate] = {}

    def register(self, template: ConstraintTemplate) -> None:
        self._templates[template.template_id] = template

    def get(self, template_id: str) -> ConstraintTemplate:
        if template_id not in self._templates:
            available = ", ".join(sorted(self._templates.keys()))
            raise KeyError(
                f"Unknown constraint template: {template_id}. Available: {available}"
            )
        return self._templates[template_id]

    def list_all(self) -> list[ConstraintTemplate]:
        return list(self._templates.values())

    def list_by_category(self, category: str) -> list[ConstraintTemplate]:
        return [t for t in self._templates.values() if t.category == category]

    def compile_config(self, config: ConstraintConfig) -> CompiledConstraint:
        """Compile a single constraint config into an executable constraint."""
        template = self.get(config.template_id)
        merged = template.resolve_parameters(config.parameters)
        penalty_fn = template.compile(merged)
        return CompiledConstraint(
            template_id=config.template_id,
            name_ja=template.name_ja,
            penalty_fn=penalty_fn,
            parameters=merged,
        )

    def compile_set(self, constraint_set: ConstraintSet) -> list[CompiledConstraint]:
        """Compile a full constraint set into executable constraints."""
        compiled = []
        for config in constraint_set.constraints:
            if config.enabled:
                compiled.append(self.compile_config(config))
        return compiled


# Global registry instance
_global_registry: ConstraintRegistry | None = None


def get_registry() -> ConstraintRegistry:
    """Get the global constraint registry, initializing if needed."""
    global _global_registry
    if _global_registry is None:
        _global_registry = _create_default_registry()
    return _global_registry


def _create_default_registry() -> ConstraintRegistry:
    """Create and populate the default registry with all built-in templates."""
    from hcu_shift.constraints.chain_constraints import NightChainIntegrity
    from hcu_shift.constraints.staff_constraints import (
        DaysOffCap,
        MaxConsecutiveWork,
        NightCap,
    )
    from hcu_shift.constraints.staffing_constraints import (
        DayStaffingMatch,
        DayStaffingVariance,
        NightStaffingMatch,
    )

    registry = ConstraintRegistry()
    for template_cls in [
        # Staffing constraints
        NightStaffingMatch,
        DayStaffingMatch,
        DayStaffingVariance,
        # Staff constraints
        MaxConsecutiveWork,
        DaysOffCap,
        NightCap,
        # Chain constraints
        NightChainIntegrity,
    ]:
        registry.register(template_cls())
    return registry
