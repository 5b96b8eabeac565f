from __future__ import annotations

import pytest

from justified_text.justifier import HAIR_SPACE
from justified_text.measurement import MeasurementCache, fixed_advance_measurer


def test_fixed_advance_measurer_uses_default_advance() -> None:
    measure = fixed_advance_measurer(7.0)
    assert measure("abc") == 21.0
    assert measure("") == 0.0


def test_fixed_advance_measurer_overrides_characters() -> None:
    measure = fixed_advance_measurer(2.0, widths={HAIR_SPACE: 0.5, "W": 4.0})
    assert measure("aW" + HAIR_SPACE) == 6.5


def test_fixed_advance_measurer_clamps_negative_widths() -> None:
    measure = fixed_advance_measurer(-3.0, widths={"x": -1.0})
    assert measure("xyz") == 0.0


def test_cache_hits_and_misses() -> None:
    calls = []

    def measure(text: str) -> float:
        calls.append(text)
        return float(len(text))

    cache = MeasurementCache(measure, context=("Family", 12.0))

    assert cache("hello") == 5.0
    assert cache("hello") == 5.0
    assert calls == ["hello"]
    stats = cache.stats()
    assert stats["calls"] == 2
    assert stats["cache_miss"] == 1
    assert stats["cache_hit"] == 1
    assert len(cache) == 1


def test_cache_invalidated_on_context_change() -> None:
    cache = MeasurementCache(lambda text: float(len(text)), context=("Family", 12.0, 1.0))
    cache("hello")
    generation_before = cache.generation

    assert cache.ensure_context(("Family", 12.0, 1.0)) is False
    assert cache.generation == generation_before

    assert cache.ensure_context(("Family", 12.0, 1.25), lambda text: 2.0 * len(text)) is True
    assert cache.generation == generation_before + 1
    assert len(cache) == 0
    assert cache("hello") == 10.0
    assert cache.stats()["cache_reset"] == 1


def test_cache_resets_when_full() -> None:
    cache = MeasurementCache(lambda text: float(len(text)), max_entries=2)
    cache("a")
    cache("bb")
    cache("ccc")

    assert len(cache) == 1
    assert cache.stats()["cache_reset"] == 1
    # Generation only tracks context changes.
    assert cache.generation == 0


@pytest.mark.pyqt_required
def test_qt_text_measurer_tracks_font_metrics(qt_app) -> None:  # noqa: ARG001 - fixture required
    from PyQt6.QtGui import QFont, QFontMetricsF

    from justified_text.measurement import qt_text_measurer

    font = QFont()
    font.setPointSizeF(14.0)
    measure = qt_text_measurer(font)
    metrics = QFontMetricsF(font)

    assert measure("justify") == pytest.approx(metrics.horizontalAdvance("justify"))
    assert measure("") == 0.0
    assert measure("ab cd") >= measure("abcd")
