from allocprep.rules.priorities import DEFAULT_PRIORITIES, PRESETS, apply_preset
from allocprep.rules.rule_builder import RuleSet

__all__ = ["DEFAULT_PRIORITIES", "PRESETS", "RuleSet", "apply_preset"]
