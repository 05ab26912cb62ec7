"""Structured trace emission for match diagnostics.

The tracer is a side observer: it never feeds back into simulation state and
owns its own random generator, so turning tracing on does not change a match.
Records are built lazily and only when they will actually be delivered.
"""

import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from fm_match.core.config import Settings


class TraceType(Enum):
    MINUTE_CONTEXT = "minute_context"
    EVENT_PROBABILITY = "event_probability"
    CHANCE_EVALUATION = "chance_evaluation"
    SUB_CANDIDATE = "sub_candidate"
    SUB_EXECUTED = "sub_executed"
    ENERGY_TICK = "energy_tick"
    POSTURE_ADJUSTMENT = "posture_adjustment"


class TraceSeverity(Enum):
    DEBUG = "debug"
    INFO = "info"
    NOTICE = "notice"


@dataclass(frozen=True)
class TraceRecord:
    """One structured diagnostic record."""
    type: TraceType
    team: str | None
    minute: int
    severity: TraceSeverity = TraceSeverity.DEBUG
    inputs: dict[str, Any] = field(default_factory=dict)
    computed: dict[str, Any] = field(default_factory=dict)
    outcome: dict[str, Any] = field(default_factory=dict)
    tags: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "team": self.team,
            "minute": self.minute,
            "severity": self.severity.value,
            "inputs": dict(self.inputs),
            "computed": dict(self.computed),
            "outcome": dict(self.outcome),
            "tags": list(self.tags),
        }


TraceSink = Callable[[TraceRecord], None]


@dataclass
class TraceConfig:
    """Emission policy for a match.

    Per-type sample rates are probabilities of keeping a record; throttle
    windows are the minimum milliseconds between two records of one type.
    """
    enabled: bool = False
    sink: TraceSink | None = None
    sample_rates: dict[TraceType, float] = field(default_factory=dict)
    throttle_ms: dict[TraceType, int] = field(default_factory=dict)
    default_sample_rate: float = 1.0
    default_throttle_ms: int = 0
    clock: Callable[[], float] = time.monotonic
    seed: int | None = None

    @classmethod
    def from_settings(cls, settings: Settings, sink: TraceSink | None = None) -> "TraceConfig":
        return cls(
            enabled=settings.trace_enabled,
            sink=sink,
            default_sample_rate=settings.trace_sample_rate,
            default_throttle_ms=settings.trace_throttle_ms,
            seed=settings.random_seed,
        )


class MatchTracer:
    """Applies sampling and throttling, then hands records to the sink."""

    def __init__(self, config: TraceConfig | None = None):
        self.config = config or TraceConfig()
        self._rng = random.Random(self.config.seed)
        self._last_emitted_ms: dict[TraceType, float] = {}
        self.emitted = 0
        self.dropped = 0

    @property
    def enabled(self) -> bool:
        return self.config.enabled and self.config.sink is not None

    def _sample_rate(self, trace_type: TraceType) -> float:
        return self.config.sample_rates.get(trace_type, self.config.default_sample_rate)

    def _throttle_window(self, trace_type: TraceType) -> int:
        return self.config.throttle_ms.get(trace_type, self.config.default_throttle_ms)

    def emit(self, trace_type: TraceType, build: Callable[[], TraceRecord]) -> bool:
        """Deliver ``build()`` if the policy keeps this record.

        ``build`` is only called for records that reach the sink.
        """
        if not self.enabled:
            return False

        rate = self._sample_rate(trace_type)
        if rate < 1.0 and self._rng.random() >= rate:
            self.dropped += 1
            return False

        window = self._throttle_window(trace_type)
        now_ms = self.config.clock() * 1000.0
        if window > 0:
            last = self._last_emitted_ms.get(trace_type)
            if last is not None and now_ms - last < window:
                self.dropped += 1
                return False

        record = build()
        self._last_emitted_ms[trace_type] = now_ms
        self.config.sink(record)
        self.emitted += 1
        return True


DISABLED_TRACER = MatchTracer()
