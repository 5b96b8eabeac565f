"""Background justification that hands results back to the Qt thread."""
from __future__ import annotations

import logging
import queue
import random
import threading
from dataclasses import dataclass
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from justified_text.justifier import HAIR_SPACE, DEFAULT_FILL_LIMIT_FACTOR, DEFAULT_MIN_FILL_LIMIT, Justifier, MeasureFn

_LOGGER = logging.getLogger("JustifiedText.Worker")


@dataclass(frozen=True)
class JustificationJob:
    ticket: int
    text: str
    width_budget: float
    measure: MeasureFn
    rng: Optional[random.Random] = None


class JustificationWorker(QObject):
    """Runs justification off the UI thread; only the newest request is delivered.

    Each ``submit`` supersedes every earlier request. Results for superseded
    tickets are dropped rather than emitted, so a slow stale job can never
    overwrite a newer result. ``justified`` is emitted from the worker thread;
    Qt queues it to receivers living on the UI thread.
    """

    justified = pyqtSignal(int, str)
    failed = pyqtSignal(int, str)

    def __init__(
        self,
        *,
        thin_space: str = HAIR_SPACE,
        fill_limit_factor: int = DEFAULT_FILL_LIMIT_FACTOR,
        min_fill_limit: int = DEFAULT_MIN_FILL_LIMIT,
    ) -> None:
        super().__init__()
        self._thin_space = thin_space
        self._fill_limit_factor = fill_limit_factor
        self._min_fill_limit = min_fill_limit
        self._jobs: "queue.Queue[Optional[JustificationJob]]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._ticket_lock = threading.Lock()
        self._latest_ticket = 0

    @property
    def latest_ticket(self) -> int:
        with self._ticket_lock:
            return self._latest_ticket

    def is_current(self, ticket: int) -> bool:
        with self._ticket_lock:
            return ticket == self._latest_ticket

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._thread_main, name="JustifiedText-Worker", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        self._jobs.put(None)
        if self._thread:
            self._thread.join(timeout=5.0)
        self._thread = None

    def submit(
        self,
        text: str,
        width_budget: float,
        measure: MeasureFn,
        *,
        rng: Optional[random.Random] = None,
    ) -> int:
        """Queue a request and return its ticket."""
        with self._ticket_lock:
            self._latest_ticket += 1
            ticket = self._latest_ticket
        self._jobs.put(JustificationJob(ticket, text, width_budget, measure, rng))
        return ticket

    def cancel(self) -> None:
        """Supersede every queued or running request."""
        with self._ticket_lock:
            self._latest_ticket += 1
        drained = 0
        while True:
            try:
                job = self._jobs.get_nowait()
            except queue.Empty:
                break
            if job is None:
                # Keep the shutdown sentinel for the worker thread.
                self._jobs.put(None)
                break
            drained += 1
        if drained:
            _LOGGER.debug("Cancelled %d pending justification job(s)", drained)

    def run_job(self, job: JustificationJob) -> Optional[str]:
        """Justify ``job`` synchronously; returns None when it was superseded or failed."""
        if not self.is_current(job.ticket):
            _LOGGER.debug("Skipping superseded justification job %d", job.ticket)
            return None
        justifier = Justifier(
            job.measure,
            rng=job.rng,
            thin_space=self._thin_space,
            fill_limit_factor=self._fill_limit_factor,
            min_fill_limit=self._min_fill_limit,
        )
        try:
            result = justifier.justify(job.text, job.width_budget)
        except Exception as exc:
            _LOGGER.warning("Justification job %d failed: %s", job.ticket, exc)
            self.failed.emit(job.ticket, str(exc))
            return None
        if not self.is_current(job.ticket):
            _LOGGER.debug("Dropping stale justification result for job %d", job.ticket)
            return None
        self.justified.emit(job.ticket, result)
        return result

    # Background thread ----------------------------------------------------

    def _thread_main(self) -> None:
        while not self._stop_event.is_set():
            job = self._jobs.get()
            if job is None:
                break
            self.run_job(job)
