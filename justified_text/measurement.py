"""Text measurement adapters used to feed the justifier."""
from __future__ import annotations

import logging
import threading
from typing import Dict, Hashable, Mapping, Optional

from PyQt6.QtGui import QFont, QFontMetricsF

from justified_text.justifier import MeasureFn

_LOGGER = logging.getLogger("JustifiedText.Measurement")


def qt_text_measurer(font: QFont) -> MeasureFn:
    """Return a measure function backed by ``QFontMetricsF`` for ``font``.

    A ``QGuiApplication`` must exist before this is called.
    """
    metrics = QFontMetricsF(QFont(font))

    def _measure(text: str) -> float:
        return max(float(metrics.horizontalAdvance(text)), 0.0)

    return _measure


def fixed_advance_measurer(advance: float = 1.0, *, widths: Optional[Mapping[str, float]] = None) -> MeasureFn:
    """Return a measure function that sums per-character advances.

    Characters listed in ``widths`` use their own advance, everything else uses
    ``advance``.
    """
    default = max(0.0, float(advance))
    overrides = {char: max(0.0, float(value)) for char, value in (widths or {}).items()}

    def _measure(text: str) -> float:
        if not overrides:
            return default * len(text)
        return sum(overrides.get(char, default) for char in text)

    return _measure


class MeasurementCache:
    """Memoizes widths for one measurement context.

    The cache is keyed by string; a change of context (font family, point
    size, fallbacks, device pixel ratio, ...) drops every entry and bumps the
    generation counter. Safe to share between the UI thread and a worker.
    """

    DEFAULT_MAX_ENTRIES = 4096

    def __init__(self, measure: MeasureFn, *, context: Hashable = None, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        self._measure = measure
        self._context = context
        self._max_entries = max(1, int(max_entries))
        self._cache: Dict[str, float] = {}
        self._lock = threading.Lock()
        self._generation = 0
        self._stats: Dict[str, int] = {"calls": 0, "cache_hit": 0, "cache_miss": 0, "cache_reset": 0}

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def context(self) -> Hashable:
        return self._context

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._stats)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __call__(self, text: str) -> float:
        with self._lock:
            self._stats["calls"] += 1
            cached = self._cache.get(text)
            if cached is not None:
                self._stats["cache_hit"] += 1
                return cached
            self._stats["cache_miss"] += 1
            measure = self._measure
        width = measure(text)
        with self._lock:
            if len(self._cache) >= self._max_entries:
                self._cache.clear()
                self._stats["cache_reset"] += 1
            self._cache[text] = width
        return width

    def ensure_context(self, context: Hashable, measure: Optional[MeasureFn] = None) -> bool:
        """Switch to ``context``; returns True when the cache was invalidated."""
        with self._lock:
            if context == self._context:
                return False
            self._context = context
            if measure is not None:
                self._measure = measure
        self.invalidate(reason="context changed")
        return True

    def invalidate(self, reason: Optional[str] = None) -> None:
        with self._lock:
            self._cache.clear()
            self._generation += 1
            self._stats["cache_reset"] += 1
            generation = self._generation
        _LOGGER.debug("Measurement cache reset (generation=%d, reason=%s)", generation, reason or "unspecified")
