"""
In-memory metrics for the tool server and the safety pipeline.

Counts tool calls (started, completed, failed, per tool), artifact
validations by overall status, gate outcomes by gate and status, and
JSON-RPC error frames by code. Timing samples are kept per stage in a
bounded window with average and p95. Nothing is persisted.
"""

import statistics
from collections import Counter, defaultdict, deque
from threading import Lock
from typing import Any, Deque, Dict, Iterable, Mapping, Optional

MAX_SAMPLES = 1000
OVERALL = "__overall__"


# =============================================================================
# Timing Window
# =============================================================================

class TimingWindow:
    """The most recent ``MAX_SAMPLES`` durations for one stage."""

    def __init__(self, max_samples: int = MAX_SAMPLES):
        self._samples: Deque[float] = deque(maxlen=max_samples)

    def add(self, duration_ms: float) -> None:
        self._samples.append(float(duration_ms))

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def average(self) -> float:
        return statistics.mean(self._samples) if self._samples else 0.0

    @property
    def p95(self) -> float:
        if not self._samples:
            return 0.0
        ordered = sorted(self._samples)
        return ordered[min(int(len(ordered) * 0.95), len(ordered) - 1)]

    def stats(self) -> Dict[str, float]:
        return {"average_ms": self.average, "p95_ms": self.p95}


# =============================================================================
# Metrics Collector (Singleton)
# =============================================================================

class MetricsCollector:
    """
    Thread-safe metrics collector.

    Usage:
        metrics = MetricsCollector.instance()
        metrics.record_tool_started("getSource")
        metrics.record_tool_completed("getSource", duration_ms=12)
        metrics.get_summary()
    """

    _instance: Optional["MetricsCollector"] = None
    _instance_lock = Lock()

    def __init__(self):
        self._lock = Lock()
        self._tools: Dict[str, Counter] = defaultdict(Counter)
        self._validations: Counter = Counter()
        self._gates: Dict[str, Counter] = defaultdict(Counter)
        self._rpc_errors: Counter = Counter()
        self._timings: Dict[str, TimingWindow] = defaultdict(TimingWindow)

    @classmethod
    def instance(cls) -> "MetricsCollector":
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton; the next instance() starts from zero."""
        with cls._instance_lock:
            cls._instance = None

    def _sample(self, stage: Optional[str], duration_ms: Optional[float]) -> None:
        # caller holds the lock
        if duration_ms is None:
            return
        self._timings[OVERALL].add(duration_ms)
        if stage:
            self._timings[stage].add(duration_ms)

    # =========================================================================
    # Recording
    # =========================================================================

    def record_tool_started(self, tool_name: str) -> None:
        with self._lock:
            self._tools[tool_name]["started"] += 1

    def record_tool_completed(self, tool_name: str, duration_ms: Optional[float] = None) -> None:
        with self._lock:
            self._tools[tool_name]["completed"] += 1
            self._sample(f"tool.{tool_name}", duration_ms)

    def record_tool_failed(self, tool_name: str) -> None:
        with self._lock:
            self._tools[tool_name]["failed"] += 1

    def record_rpc_error(self, code: int) -> None:
        with self._lock:
            self._rpc_errors[code] += 1

    def record_validation(
        self,
        overall_status: str,
        gate_results: Iterable[Mapping[str, Any]],
        duration_ms: Optional[float] = None,
    ) -> None:
        """One artifact validation: overall status plus each gate's outcome."""
        with self._lock:
            self._validations[overall_status] += 1
            for result in gate_results:
                self._gates[result["name"]][result["status"]] += 1
            self._sample("safety.validate", duration_ms)

    def record_processing_time(self, stage: str, duration_ms: float) -> None:
        with self._lock:
            self._sample(stage, duration_ms)

    # =========================================================================
    # Reading
    # =========================================================================

    def get_timing_stats(self, stage: Optional[str] = None) -> Dict[str, float]:
        with self._lock:
            window = self._timings.get(stage or OVERALL) or TimingWindow()
            stats = window.stats()
            stats["sample_count"] = len(window)
            return stats

    def _tool_totals(self) -> Dict[str, Any]:
        by_name: Dict[str, Dict[str, int]] = {}
        totals = Counter()
        for name, counts in self._tools.items():
            by_name[name] = {key: counts[key] for key in ("started", "completed", "failed")}
            totals.update(counts)
        return {
            "started": totals["started"],
            "completed": totals["completed"],
            "failed": totals["failed"],
            "by_name": by_name,
        }

    def get_summary(self) -> Dict[str, Any]:
        """Snapshot of every metric as plain dicts."""
        with self._lock:
            overall = self._timings.get(OVERALL) or TimingWindow()
            return {
                "tools": self._tool_totals(),
                "safety": {
                    "validations": sum(self._validations.values()),
                    "by_status": dict(self._validations),
                    "by_gate": {name: dict(counts) for name, counts in self._gates.items()},
                },
                "rpc_errors": {str(code): count for code, count in self._rpc_errors.items()},
                "timings": {
                    "overall": overall.stats(),
                    "by_stage": {
                        stage: window.stats()
                        for stage, window in self._timings.items()
                        if stage != OVERALL
                    },
                },
            }


# =============================================================================
# Module-level convenience functions
# =============================================================================

def get_metrics() -> MetricsCollector:
    """Get the global metrics collector."""
    return MetricsCollector.instance()


def record_tool_started(tool_name: str) -> None:
    get_metrics().record_tool_started(tool_name)


def record_tool_completed(tool_name: str, duration_ms: Optional[float] = None) -> None:
    get_metrics().record_tool_completed(tool_name, duration_ms)


def record_tool_failed(tool_name: str) -> None:
    get_metrics().record_tool_failed(tool_name)


def record_processing_time(stage: str, duration_ms: float) -> None:
    get_metrics().record_processing_time(stage, duration_ms)
