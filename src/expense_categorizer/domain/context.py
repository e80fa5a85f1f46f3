from dataclasses import dataclass, field
from time import perf_counter

from expense_categorizer.models import RunKind


@dataclass
class RunContext:
    """Request-scoped state threaded through every pipeline stage."""

    owner_id: str
    kind: RunKind
    started_at: float = field(default_factory=perf_counter)
    run_id: str | None = None

    @property
    def label(self) -> str:
        return self.kind.value

    def elapsed_ms(self) -> int:
        return int((perf_counter() - self.started_at) * 1000)
