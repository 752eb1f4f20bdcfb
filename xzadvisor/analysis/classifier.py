"""Content classification from magic numbers and a text heuristic.

Checks run in a fixed priority order and the first match wins:
    1. image signatures      (PNG, JPEG, GIF)
    2. executable signatures (ELF, PE/MZ)
    3. archive signatures    (ZIP, tar 'ustar' at offset 0)
    4. text heuristic        (no NUL, >90% printable/whitespace in the first 512 bytes)
    5. binary                (everything else)

An empty sample is UNKNOWN. Classification never fails.

Each category maps to default compression settings (preset, dictionary
size and filter chain) used by the optimizer and the recommendation engine.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from ..codec.xz import DEFAULT_PRESET, FilterId, build_filter_chain
from ..config import MIB, AdvisorConfig
from ..loaders import PathLike, read_sample

logger = logging.getLogger(__name__)


class ContentCategory(Enum):
    UNKNOWN = "unknown"
    TEXT = "text"
    BINARY = "binary"
    EXECUTABLE = "executable"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    ARCHIVE = "archive"
    DATABASE = "database"


_IMAGE_SIGNATURES = (
    b"\x89PNG",
    b"\xff\xd8\xff",
    b"GIF87a",
    b"GIF89a",
)
_EXECUTABLE_SIGNATURES = (
    b"\x7fELF",
    b"MZ",
)
_ARCHIVE_SIGNATURES = (
    b"PK\x03\x04",
    b"ustar",
)

_SIGNATURE_TABLE = (
    (ContentCategory.IMAGE, _IMAGE_SIGNATURES),
    (ContentCategory.EXECUTABLE, _EXECUTABLE_SIGNATURES),
    (ContentCategory.ARCHIVE, _ARCHIVE_SIGNATURES),
)

_LONGEST_SIGNATURE = max(len(s) for _, sigs in _SIGNATURE_TABLE for s in sigs)


def as_byte_view(data) -> memoryview:
    """Flat unsigned-byte view over any bytes-like object, without copying."""
    view = memoryview(data)
    if view.format != "B" or view.ndim != 1:
        view = view.cast("B")
    return view


def is_text(data, window: int = 512, threshold_pct: int = 90) -> bool:
    """Text heuristic over the first ``window`` bytes.

    A NUL byte anywhere in the window means binary. Otherwise the share of
    printable ASCII (0x20-0x7E) and whitespace (0x09-0x0D) bytes must be
    strictly above ``threshold_pct`` percent.
    """
    view = as_byte_view(data)[:window]
    if len(view) == 0:
        return False

    arr = np.frombuffer(view, dtype=np.uint8)
    if np.any(arr == 0):
        return False
    printable = np.count_nonzero(
        ((arr >= 0x20) & (arr <= 0x7E)) | ((arr >= 0x09) & (arr <= 0x0D))
    )
    return printable * 100 > len(arr) * threshold_pct


def detect_content_category(data, config: Optional[AdvisorConfig] = None) -> ContentCategory:
    """Classify a byte sample.

    Args:
        data: Bytes-like sample, ideally the first 512+ bytes of the input.
        config: Optional config for the text window and threshold.

    Returns:
        The ContentCategory of the sample.
    """
    config = config or AdvisorConfig()
    view = as_byte_view(data)
    if len(view) == 0:
        return ContentCategory.UNKNOWN

    head = view[:_LONGEST_SIGNATURE].tobytes()
    for category, signatures in _SIGNATURE_TABLE:
        if head.startswith(signatures):
            return category

    if is_text(view, config.classifier_window, config.text_threshold_pct):
        return ContentCategory.TEXT

    return ContentCategory.BINARY


# ---------------------------------------------------------------------------
# Category -> default settings
# ---------------------------------------------------------------------------


@dataclass
class CompressionSettings:
    """Preset, dictionary size and filter chain for one input."""
    category: ContentCategory
    preset: int = DEFAULT_PRESET
    dict_size: int = 0  # 0 = preset default
    filters: tuple = field(default=(FilterId.LZMA2,))

    def to_filter_chain(self) -> list[dict]:
        """Filter specs ready for ``lzma.compress(filters=...)``."""
        return build_filter_chain(self.filters, self.preset, self.dict_size)

    def as_dict(self) -> dict:
        return {
            "category": self.category.value,
            "preset": self.preset,
            "dict_size": self.dict_size,
            "filters": [f.name for f in self.filters],
        }


# (preset, dict_size, filters)
_DEFAULT_SETTINGS = {
    # Text compresses well: spend more effort
    ContentCategory.TEXT: (7, 8 * MIB, (FilterId.LZMA2,)),
    # BCJ filter for machine code
    ContentCategory.EXECUTABLE: (6, 16 * MIB, (FilterId.X86, FilterId.LZMA2)),
    # Already compressed: go fast
    ContentCategory.IMAGE: (3, 4 * MIB, (FilterId.LZMA2,)),
    ContentCategory.ARCHIVE: (6, 8 * MIB, (FilterId.LZMA2,)),
}
_FALLBACK_SETTINGS = (DEFAULT_PRESET, 0, (FilterId.LZMA2,))


def default_settings(category: ContentCategory) -> CompressionSettings:
    """Default compression settings for a content category."""
    preset, dict_size, filters = _DEFAULT_SETTINGS.get(category, _FALLBACK_SETTINGS)
    return CompressionSettings(
        category=category, preset=preset, dict_size=dict_size, filters=filters,
    )


def analyze_file(path: PathLike, config: Optional[AdvisorConfig] = None) -> CompressionSettings:
    """Classify a file from its first bytes and return the default settings.

    An unreadable file is treated as UNKNOWN.
    """
    config = config or AdvisorConfig()
    try:
        head = read_sample(path, config.classifier_window)
    except OSError as exc:
        logger.warning("Cannot read %s: %s", path, exc)
        return default_settings(ContentCategory.UNKNOWN)
    return default_settings(detect_content_category(head, config))
