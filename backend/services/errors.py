"""
Calibration service errors

Every failure the search engine reports is one of these. Each carries a
machine-readable `kind` and a human-readable `detail`; formatting for the
wire is left to the API layer (see api/calibrations.py).
"""
from typing import Iterable, List


class CalibrationServiceError(Exception):
    """Base class for all search/lookup failures."""
    kind = "error"
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.detail}


class InvalidCriteria(CalibrationServiceError):
    """Raised when search parameters are missing or malformed."""
    kind = "invalid_criteria"
    status_code = 400


class NotFound(CalibrationServiceError):
    """Raised when a calibration ID does not resolve to a published calibration."""
    kind = "not_found"
    status_code = 404


class TaxonNotFound(NotFound):
    """Raised when one or more taxon names cannot be resolved."""
    kind = "taxon_not_found"

    def __init__(self, taxa: Iterable[str], stage: str = "taxa"):
        self.taxa: List[str] = list(taxa)
        super().__init__(f"Unable to find {stage} for: {', '.join(self.taxa)}")


class MRCANotFound(NotFound):
    """Raised when two resolved taxa have no computable common ancestor."""
    kind = "mrca_not_found"

    def __init__(self, taxa: Iterable[str]):
        self.taxa: List[str] = list(taxa)
        super().__init__(f"No common ancestor found for: {', '.join(self.taxa)}")


class UpstreamError(CalibrationServiceError):
    """Raised when the data store fails or times out."""
    kind = "upstream_error"
    status_code = 502
