"""Inter-word justification for text rendered at a fixed width."""

from justified_text.justifier import (
    HAIR_SPACE,
    NORMAL_SPACE,
    JustifiedLine,
    Justifier,
    justify,
    strip_thin_spaces,
)
from justified_text.logging_utils import package_logger
from justified_text.version import __version__

package_logger()

__all__ = [
    "HAIR_SPACE",
    "NORMAL_SPACE",
    "JustifiedLine",
    "Justifier",
    "justify",
    "strip_thin_spaces",
    "__version__",
]
