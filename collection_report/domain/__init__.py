"""Domain layer package."""

from .branch_matcher import SIMILARITY_THRESHOLD, match_branch, similarity
from .models import AMOUNT_FIELDS, ExtractionResult, ReportRow, ReportTotals, TotalsPercentage
from .vocabulary import DEFAULT_BRANCHES, BranchVocabulary

__all__ = [
    "AMOUNT_FIELDS",
    "DEFAULT_BRANCHES",
    "SIMILARITY_THRESHOLD",
    "BranchVocabulary",
    "ExtractionResult",
    "ReportRow",
    "ReportTotals",
    "TotalsPercentage",
    "match_branch",
    "similarity",
]
