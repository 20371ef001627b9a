# src/allocprep/rules/priorities.py
from __future__ import annotations

from collections.abc import Sequence

from allocprep.errors import ConfigError
from allocprep.schemas.models import Priority


def _p(name: str, weight: int, description: str) -> Priority:
    return Priority(name=name, weight=weight, description=description)


DEFAULT_PRIORITIES: tuple[Priority, ...] = (
    _p("Client Priority Level", 30, "Higher priority clients get preference"),
    _p("Task Duration", 20, "Shorter tasks may be prioritized"),
    _p("Worker Qualification", 25, "Higher qualified workers for complex tasks"),
    _p("Phase Preference", 15, "Tasks running in preferred phases"),
    _p("Load Distribution", 10, "Even distribution across workers"),
)

PRESETS: dict[str, tuple[Priority, ...]] = {
    "maximize-fulfillment": (
        _p("Client Priority Level", 40, "Higher priority clients get preference"),
        _p("Task Duration", 30, "Complete more tasks quickly"),
        _p("Worker Qualification", 20, "Match skills efficiently"),
        _p("Phase Preference", 10, "Phase timing consideration"),
        _p("Load Distribution", 0, "Fairness not prioritized"),
    ),
    "fair-distribution": (
        _p("Load Distribution", 40, "Even workload across all workers"),
        _p("Worker Qualification", 20, "Balanced skill utilization"),
        _p("Client Priority Level", 20, "Some priority consideration"),
        _p("Task Duration", 10, "Minor duration consideration"),
        _p("Phase Preference", 10, "Minor phase consideration"),
    ),
    "minimize-workload": (
        _p("Load Distribution", 35, "Minimize total workload"),
        _p("Task Duration", 30, "Prefer shorter tasks"),
        _p("Worker Qualification", 15, "Efficient skill matching"),
        _p("Phase Preference", 15, "Optimize phase scheduling"),
        _p("Client Priority Level", 5, "Lower priority consideration"),
    ),
}


def apply_preset(name: str) -> list[Priority]:
    """Priorities of a named preset; unknown names raise ConfigError."""
    try:
        return list(PRESETS[name])
    except KeyError:
        raise ConfigError(
            f"Unknown priority preset: {name!r}",
            source="priorities.apply_preset",
            suggested_action=f"Use one of: {', '.join(PRESETS)}",
        ) from None


def set_weight(priorities: Sequence[Priority], index: int, weight: int) -> list[Priority]:
    """New list with one weight replaced, clamped to [0, 100]."""
    if not 0 <= index < len(priorities):
        raise ConfigError(
            f"Priority index {index} out of bounds", source="priorities.set_weight"
        )
    clamped = max(0, min(100, int(weight)))
    out = list(priorities)
    out[index] = out[index].model_copy(update={"weight": clamped})
    return out


def total_weight(priorities: Sequence[Priority]) -> int:
    return sum(p.weight for p in priorities)


def normalize_weights(priorities: Sequence[Priority]) -> list[Priority]:
    """
    Rescale weights to shares of 100, rounded half up per entry. Rounding may
    leave the total a point off 100. A zero total is returned unchanged.
    """
    total = total_weight(priorities)
    if total == 0:
        return list(priorities)
    return [
        p.model_copy(update={"weight": int(p.weight * 100 / total + 0.5)}) for p in priorities
    ]


__all__ = [
    "DEFAULT_PRIORITIES",
    "PRESETS",
    "apply_preset",
    "normalize_weights",
    "set_weight",
    "total_weight",
]
