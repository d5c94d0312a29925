"""Domain models for progress reports."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProgressReport:
    """Result of scoring one goal.

    An empty ``progress`` mapping means there was nothing to score yet; the
    ``message`` says why.
    """

    message: str
    progress: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class GraphReport:
    """Day buckets for a graph together with the window they cover."""

    message: str
    data: list[dict[str, object]]
    date_range: dict[str, object | None]

    def to_payload(self) -> dict[str, object]:
        """Return the JSON response body."""
        return {
            "message": self.message,
            "data": self.data,
            "dateRange": self.date_range,
        }


@dataclass(frozen=True)
class OverviewProgress:
    """Goal counts per status and the mean goal progress."""

    progress: int
    completed: int
    pending: int
    overdue: int
    total: int
