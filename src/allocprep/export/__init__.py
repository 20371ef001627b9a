from allocprep.export.exporter import ExportGate, check_export_gate, export_all

__all__ = ["ExportGate", "check_export_gate", "export_all"]
