"""Timing of mailbox refreshes."""

import time
from typing import Optional

from .models import RefreshReport


class MetricsCollector:
    """Collects named timers and turns them into refresh reports."""

    def __init__(self):
        self._start_times: dict[str, float] = {}
        self.last_report: Optional[RefreshReport] = None

    def start_timer(self, name: str) -> None:
        """Start a named timer."""
        self._start_times[name] = time.perf_counter()

    def stop_timer(self, name: str) -> float:
        """Stop a named timer and return elapsed time."""
        if name not in self._start_times:
            return 0.0
        elapsed = time.perf_counter() - self._start_times[name]
        del self._start_times[name]
        return elapsed

    def create_refresh_report(self, per_account: dict[str, int], duration: float) -> RefreshReport:
        """Create the report for one refresh of all mailboxes."""
        self.last_report = RefreshReport(
            total_new=sum(per_account.values()),
            per_account=dict(per_account),
            duration_sec=duration,
        )
        return self.last_report
