from allocprep.advisory.client import AdvisoryClient, HttpAdvisoryClient, build_client
from allocprep.advisory.service import AdvisoryService

__all__ = ["AdvisoryClient", "AdvisoryService", "HttpAdvisoryClient", "build_client"]
