"""Data faults raised by the matrix builder and the ordination helpers."""
from __future__ import annotations


class RowAlignmentError(ValueError):
    """Community and environmental matrices do not share the same row labels in the same order."""


class MissingCovariateError(ValueError):
    """A plot-survey has no value for a site covariate."""

    def __init__(self, missing: dict[str, list[str]]):
        self.missing = missing
        preview = {k: v for k, v in list(missing.items())[:10]}
        super().__init__(
            f"Missing covariate values for {len(missing)} plot-survey(s) "
            f"(first 10): {preview}"
        )


class CovariateConflictError(ValueError):
    """Covariate values differ between records of the same plot-survey."""

    def __init__(self, conflicts: dict[str, list[str]]):
        self.conflicts = conflicts
        preview = {k: v for k, v in list(conflicts.items())[:10]}
        super().__init__(
            f"Conflicting covariate values within {len(conflicts)} plot-survey(s) "
            f"(first 10): {preview}"
        )


class CovariateConflictWarning(UserWarning):
    """Same as CovariateConflictError, emitted when conflicts are only reported."""


class CovariateEncodingError(ValueError):
    """A non-numeric covariate was handed to a constrained ordination fit."""

    def __init__(self, covariate: str, call: str, dtype: object):
        self.covariate = covariate
        self.call = call
        super().__init__(
            f"{call}: covariate '{covariate}' has non-numeric dtype {dtype}. "
            f"Re-encode it first, e.g. with encode_covariates(env, ['{covariate}'])."
        )


class AdjustedR2DomainError(ValueError):
    """Adjusted R2 is undefined because n - rank - 1 <= 0."""

    def __init__(self, n: int, rank: int):
        self.n = n
        self.rank = rank
        super().__init__(
            f"Adjusted R2 undefined for n={n}, rank={rank}: "
            f"n - rank - 1 = {n - rank - 1} must be positive"
        )
