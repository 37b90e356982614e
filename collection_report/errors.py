"""Exception types raised by the report table and its input adapters."""

from __future__ import annotations


class CollectionReportError(Exception):
    """Base class for collection report failures."""


class BranchRequiredError(CollectionReportError, ValueError):
    """A row cannot be committed without a branch name."""


class UnknownBranchError(CollectionReportError, KeyError):
    """The requested branch is not present in the table."""


class InvalidAmountError(CollectionReportError, ValueError):
    """A cell edit is not blank and not a non-negative decimal amount."""


class ExtractionPayloadError(CollectionReportError, ValueError):
    """The vision service response does not contain a JSON object."""
