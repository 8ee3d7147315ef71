"""Domain-specific exceptions for store_stats.

All exceptions inherit from StoreStatsError and carry a human-readable
``cause`` taken from the underlying data layer.
"""


class StoreStatsError(Exception):
    """Base exception for all store_stats errors.

    Attributes:
        cause: Human-readable description of what went wrong.
    """

    def __init__(self, cause: str) -> None:
        if not cause:
            cause = self.__class__.__name__
        super().__init__(cause)
        self.cause = cause


class ConfigError(StoreStatsError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - The fiscal start month is outside 1..12
    - An unknown window policy is requested
    - An environment variable cannot be parsed
    """


class StoreError(StoreStatsError):
    """Raised by the entity store or a blob store when the data layer fails."""


class ETLError(StoreStatsError):
    """Raised when a stage of the yearly sales job fails."""


class AggregationError(ETLError):
    """Raised when the line item query fails during aggregation.

    The snapshot cache and the popularity metadata are left untouched.
    """


class SyncError(ETLError):
    """Raised when the popularity metadata reconciliation fails.

    The snapshot may already be replaced at this point, so the cached
    report and the product metadata disagree until the next successful run.
    """
