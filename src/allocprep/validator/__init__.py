from allocprep.validator.aggregator import ValidationReport, build_report, validate_all

__all__ = ["ValidationReport", "build_report", "validate_all"]
