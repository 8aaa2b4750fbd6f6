"""Ingest errors."""


class IngestError(ValueError):
    """Input could not be read as a task export at all."""
