"""PyQt6 label that justifies its text to the available width."""
from __future__ import annotations

import logging
import random
from typing import Optional

from PyQt6.QtCore import QEvent
from PyQt6.QtGui import QFont, QResizeEvent
from PyQt6.QtWidgets import QLabel, QSizePolicy, QWidget

from justified_text.fonts import font_context
from justified_text.justifier import Justifier
from justified_text.measurement import MeasurementCache, qt_text_measurer
from justified_text.settings import DebugConfig, JustifierSettings
from justified_text.worker import JustificationWorker

_LOGGER = logging.getLogger("JustifiedText.Widget")


class JustifiedLabel(QLabel):
    """Word-wrapped QLabel whose lines span the full content width.

    The label keeps the text it was given and re-justifies it whenever the
    content width, the font or the text changes. Labels sized to their content
    (horizontal policy ``Maximum``) and labels without a usable width show the
    text untouched.
    """

    def __init__(
        self,
        text: str = "",
        parent: Optional[QWidget] = None,
        *,
        settings: Optional[JustifierSettings] = None,
        debug_config: Optional[DebugConfig] = None,
        worker: Optional[JustificationWorker] = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings or JustifierSettings()
        self._debug_config = debug_config or DebugConfig()
        self._source_text = ""
        self._applied_text = ""
        self._applied_width = -1
        self._pending_ticket = 0
        self._rng = random.Random(self._settings.random_seed)
        self._measure_cache: Optional[MeasurementCache] = None
        self._worker = worker
        if self._worker is None and self._settings.background:
            self._worker = JustificationWorker(
                thin_space=self._settings.thin_space,
                fill_limit_factor=self._settings.fill_limit_factor,
                min_fill_limit=self._settings.min_fill_limit,
            )
            self._worker.setParent(self)
            self._worker.start()
        if self._worker is not None:
            self._worker.justified.connect(self._apply_result)
        self.setWordWrap(True)
        self.setText(text)

    # Public API ------------------------------------------------------------

    def source_text(self) -> str:
        return self._source_text

    def setText(self, text: Optional[str]) -> None:  # noqa: N802 - Qt override
        self._source_text = text or ""
        self._applied_width = -1
        super().setText(self._source_text)
        self.request_justification()

    def width_budget(self) -> int:
        """Width available for text: the content rect minus the label margin and indent."""
        width = self.contentsRect().width() - 2 * self.margin()
        if self.indent() > 0:
            width -= self.indent()
        return max(0, width)

    def setMargin(self, margin: int) -> None:  # noqa: N802 - Qt override
        super().setMargin(margin)
        self.request_justification()

    def setIndent(self, indent: int) -> None:  # noqa: N802 - Qt override
        super().setIndent(indent)
        self.request_justification()

    def measure_stats(self) -> dict[str, int]:
        return self._measure_cache.stats() if self._measure_cache is not None else {}

    def shutdown(self) -> None:
        if self._worker is not None:
            self._worker.cancel()
            self._worker.stop()

    def request_justification(self) -> None:
        """Justify the source text for the current width, if that is possible."""
        budget = self.width_budget()
        text = self._source_text
        if not self._should_justify(budget, text):
            if self._worker is not None:
                self._worker.cancel()
            self._pending_ticket = 0
            self._applied_width = -1
            if self.text() != text:
                QLabel.setText(self, text)
            return
        if budget == self._applied_width:
            return
        measure = self._measurer()
        if self._worker is not None:
            self._pending_ticket = self._worker.submit(text, float(budget), measure, rng=self._rng)
            self._applied_width = budget
            return
        justifier = Justifier(
            measure,
            rng=self._rng,
            thin_space=self._settings.thin_space,
            fill_limit_factor=self._settings.fill_limit_factor,
            min_fill_limit=self._settings.min_fill_limit,
        )
        self._applied_width = budget
        self._show(justifier.justify(text, float(budget)))

    # Qt events -------------------------------------------------------------

    def resizeEvent(self, event: QResizeEvent) -> None:  # noqa: N802 - Qt override
        super().resizeEvent(event)
        self.request_justification()

    def changeEvent(self, event: QEvent) -> None:  # noqa: N802 - Qt override
        super().changeEvent(event)
        if event.type() == QEvent.Type.FontChange:
            self._applied_width = -1
            self.request_justification()

    # Internals -------------------------------------------------------------

    def _should_justify(self, budget: int, text: str) -> bool:
        if budget <= 0 or not text:
            return False
        if self.sizePolicy().horizontalPolicy() == QSizePolicy.Policy.Maximum:
            return False
        return True

    def _measurer(self) -> MeasurementCache:
        font = QFont(self.font())
        context = font_context(font, self.devicePixelRatioF())
        if self._measure_cache is None:
            self._measure_cache = MeasurementCache(qt_text_measurer(font), context=context)
        elif context != self._measure_cache.context:
            self._measure_cache.ensure_context(context, qt_text_measurer(font))
        return self._measure_cache

    def _apply_result(self, ticket: int, text: str) -> None:
        if ticket != self._pending_ticket or (self._worker is not None and not self._worker.is_current(ticket)):
            _LOGGER.debug("Ignoring justification result %d (waiting for %d)", ticket, self._pending_ticket)
            return
        self._show(text)

    def _show(self, text: str) -> None:
        self._applied_text = text
        # Bypass setText so the source text is kept.
        QLabel.setText(self, text)
        if self._debug_config.trace_lines:
            _LOGGER.debug("Justified %d chars to width %d", len(self._source_text), self._applied_width)
        if self._debug_config.log_measure_stats and self._measure_cache is not None:
            _LOGGER.debug("Measurement stats: %s", self._measure_cache.stats())
