"""Inter-word justification of plain text against a measured width budget.

Lines are packed greedily on normal spaces; embedded newline or carriage-return
markers force a break after the token carrying them. Every completed line
except the last (and except single-token lines) is then padded with thin
spaces at random interior positions until one more unit would reach the
budget, so the extra spacing does not form a visible pattern.

The output keeps the source text intact apart from the inserted thin spaces:
``strip_thin_spaces(justify(text, ...)) == text``.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

HAIR_SPACE = "\u200a"
NORMAL_SPACE = " "

DEFAULT_FILL_LIMIT_FACTOR = 16
DEFAULT_MIN_FILL_LIMIT = 512

MeasureFn = Callable[[str], float]

_LOGGER = logging.getLogger("JustifiedText.Justifier")


@dataclass(frozen=True)
class JustifiedLine:
    """One finalized line of output."""

    tokens: Tuple[str, ...]
    text: str
    filled: bool = False
    hard_break: bool = False
    overflow: bool = False
    fallback: bool = False

    @property
    def visible_text(self) -> str:
        """Line text without the separator that joins it to the next line."""
        if self.text.endswith(NORMAL_SPACE):
            return self.text[: -len(NORMAL_SPACE)]
        return self.text


def has_hard_break(token: str) -> bool:
    return "\n" in token or "\r" in token


def join_tokens(tokens: Sequence[str], add_spaces: bool) -> str:
    """Concatenate tokens, optionally following each one with a normal space.

    Hard-break tokens never get a trailing space; the break already ends the
    visual line.
    """
    if not add_spaces:
        return "".join(tokens)
    parts: List[str] = []
    for token in tokens:
        parts.append(token)
        if not has_hard_break(token):
            parts.append(NORMAL_SPACE)
    return "".join(parts)


def strip_thin_spaces(text: str, thin_space: str = HAIR_SPACE) -> str:
    return text.replace(thin_space, "")


class Justifier:
    """Justifies text for a single measurement context.

    ``measure`` must return the rendered width of a string in the same units
    as the width budget. ``rng`` decides where thin spaces go; pass a seeded
    ``random.Random`` for reproducible output.
    """

    def __init__(
        self,
        measure: MeasureFn,
        *,
        rng: Optional[random.Random] = None,
        thin_space: str = HAIR_SPACE,
        fill_limit_factor: int = DEFAULT_FILL_LIMIT_FACTOR,
        min_fill_limit: int = DEFAULT_MIN_FILL_LIMIT,
    ) -> None:
        if not thin_space:
            raise ValueError("thin_space must be a non-empty string")
        self._measure = measure
        self._rng = rng if rng is not None else random.Random()
        self._thin_space = thin_space
        self._fill_limit_factor = max(1, int(fill_limit_factor))
        self._min_fill_limit = max(1, int(min_fill_limit))

    @property
    def thin_space(self) -> str:
        return self._thin_space

    def justify(self, text: str, width_budget: float) -> str:
        """Return ``text`` with inter-word spacing stretched to ``width_budget``."""
        if not text or width_budget <= 0:
            return text
        return "".join(line.text for line in self.break_lines(text, width_budget))

    def break_lines(self, text: str, width_budget: float) -> List[JustifiedLine]:
        """Split ``text`` into finalized lines, gap filling all but the last."""
        if not text or width_budget <= 0:
            return []

        lines: List[JustifiedLine] = []
        current: List[str] = []
        overflow = False

        for token in text.split(NORMAL_SPACE):
            if self._fits(join_tokens(current, True) + token, width_budget):
                current.append(token)
            else:
                if current:
                    lines.append(self._finalize_filled(current, width_budget, overflow))
                    overflow = not self._fits(token, width_budget)
                else:
                    # Nothing else on the line, so the token alone is too wide.
                    overflow = True
                current = [token]
            if has_hard_break(token):
                lines.append(
                    JustifiedLine(
                        tokens=tuple(current),
                        text=self._normal_line(current) + NORMAL_SPACE,
                        hard_break=True,
                        overflow=overflow and len(current) == 1,
                    )
                )
                current = []
                overflow = False

        if current:
            lines.append(
                JustifiedLine(
                    tokens=tuple(current),
                    text=self._normal_line(current),
                    overflow=overflow and len(current) == 1,
                )
            )
        elif lines:
            # Text ended on a hard break; the final separator was never consumed.
            last = lines[-1]
            lines[-1] = JustifiedLine(
                tokens=last.tokens,
                text=last.text[: -len(NORMAL_SPACE)],
                filled=last.filled,
                hard_break=last.hard_break,
                overflow=last.overflow,
                fallback=last.fallback,
            )
        return lines

    def fill_line(self, tokens: Sequence[str], width_budget: float) -> str:
        """Pad a line with thin spaces so it spans ``width_budget``.

        The returned text ends with the normal space separating it from the
        following line. Lines with fewer than two non-empty tokens come back
        normally spaced.
        """
        text, _filled, _fallback = self._fill(tokens, width_budget)
        return text

    # Internals --------------------------------------------------------------

    def _fits(self, candidate: str, width_budget: float) -> bool:
        return self._measure(candidate) < width_budget

    def _normal_line(self, tokens: Sequence[str]) -> str:
        return NORMAL_SPACE.join(tokens)

    def _finalize_filled(self, tokens: Sequence[str], width_budget: float, overflow: bool) -> JustifiedLine:
        text, filled, fallback = self._fill(tokens, width_budget)
        return JustifiedLine(
            tokens=tuple(tokens),
            text=text,
            filled=filled,
            overflow=overflow and len(tokens) == 1,
            fallback=fallback,
        )

    def _fill(self, tokens: Sequence[str], width_budget: float) -> Tuple[str, bool, bool]:
        normal = self._normal_line(tokens) + NORMAL_SPACE
        words = [index for index, token in enumerate(tokens) if token]
        if len(words) < 2:
            return normal, False, False

        expanded: List[str] = []
        for token in tokens:
            expanded.append(token)
            expanded.append(NORMAL_SPACE)

        # Thin spaces stay between the first and last non-empty tokens.
        low = 2 * words[0] + 1
        high = 2 * words[-1]
        limit = max(self._min_fill_limit, self._fill_limit_factor * len(normal))
        inserted = 0
        while self._fits(join_tokens(expanded, False) + self._thin_space, width_budget):
            if inserted >= limit:
                _LOGGER.warning(
                    "Gap filling stopped after %d thin spaces (budget=%.1f, line=%r); "
                    "measurement looks inconsistent, keeping normal spacing",
                    inserted,
                    width_budget,
                    normal,
                )
                return normal, False, True
            expanded.insert(self._rng.randint(low, high), self._thin_space)
            high += 1
            inserted += 1

        _LOGGER.debug("Inserted %d thin spaces into %d-token line", inserted, len(tokens))
        return join_tokens(expanded, False), inserted > 0, False


def justify(
    text: str,
    width_budget: float,
    measure: MeasureFn,
    *,
    rng: Optional[random.Random] = None,
    thin_space: str = HAIR_SPACE,
) -> str:
    """Justify ``text`` to ``width_budget`` using ``measure`` for widths."""
    return Justifier(measure, rng=rng, thin_space=thin_space).justify(text, width_budget)
