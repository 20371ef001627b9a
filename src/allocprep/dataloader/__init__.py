from allocprep.dataloader.records_loader import RecordsLoader
from allocprep.dataloader.sample_data import sample_data
from allocprep.dataloader.types import LoadResult

__all__ = ["LoadResult", "RecordsLoader", "sample_data"]
