"""
churn_pipeline/errors.py
Exceptions raised by the pipeline stages. Missing input files raise the
built-in FileNotFoundError.
"""


class ChurnPipelineError(Exception):
    """Base class for pipeline errors."""


class SchemaError(ChurnPipelineError, ValueError):
    """An expected column is absent or has the wrong type."""


class DomainError(ChurnPipelineError, ValueError):
    """A value lies outside the domain of a transform (log of a non-positive number)."""


class DegenerateColumnError(ChurnPipelineError, ValueError):
    """A column has zero standard deviation and cannot be scaled."""


class TrainingFailure(ChurnPipelineError, RuntimeError):
    """A model adapter raised while fitting or predicting."""
