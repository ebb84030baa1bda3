"""
In-memory request counters.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict


class RequestStats:
    """Chat completion requests per resolved model since startup."""

    def __init__(self):
        self._requests_by_model: Counter = Counter()

    def record_request(self, model: str) -> None:
        self._requests_by_model[model] += 1

    def snapshot(self) -> Dict[str, Dict[str, int]]:
        return {"requests_by_model": dict(self._requests_by_model)}
