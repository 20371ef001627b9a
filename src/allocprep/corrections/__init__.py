from allocprep.corrections.applier import apply_correction
from allocprep.corrections.checker import would_resolve

__all__ = ["apply_correction", "would_resolve"]
