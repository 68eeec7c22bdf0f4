from typing import Optional


class ProbeError(RuntimeError):
    """Base class for every error raised by hostprobe."""


class ConfigError(ProbeError):
    """A required setting is missing; the run cannot start."""


class MetricReadError(ProbeError):
    """
    A single metric could not be collected.

    These never abort a run. The evaluator turns them into alert lines so the
    operator learns why a metric is missing.
    """


class SourceUnavailable(MetricReadError):
    """A kernel statistics file could not be opened or read."""


class MalformedData(MetricReadError):
    """A required line was present but its fields were missing or unparsable."""


class InvalidDelta(MetricReadError):
    """Two CPU snapshots did not advance (counter reset or no elapsed work)."""


class MetricsUnavailable(MetricReadError):
    """A required memory counter was missing or zero."""


class DispatchError(ProbeError):
    """The alert could not be delivered to the notification endpoint."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
