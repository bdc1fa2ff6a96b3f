from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Union

from pdfsqueeze.models.common import CompressionLevel


@dataclass(frozen=True)
class LevelSettings:
    quality: int
    scale: float
    native_preset: str


LEVEL_POLICY: Mapping[CompressionLevel, LevelSettings] = MappingProxyType(
    {
        #                        JPEG   scale  Ghostscript PDFSETTINGS
        CompressionLevel.low: LevelSettings(85, 1.5, "/printer"),
        CompressionLevel.medium: LevelSettings(60, 1.2, "/ebook"),
        CompressionLevel.high: LevelSettings(35, 1.0, "/screen"),
    }
)

DEFAULT_LEVEL = CompressionLevel.medium


def resolve_level(raw: Optional[Union[str, CompressionLevel]]) -> CompressionLevel:
    """تحويل قيمة المستوى القادمة من المستخدم إلى مستوى معروف.

    المستوى تفضيل للمستخدم وليس حقلًا حرجًا، لذا أي قيمة غير معروفة تعود إلى medium.
    """
    if isinstance(raw, CompressionLevel):
        return raw
    if not isinstance(raw, str):
        return DEFAULT_LEVEL
    try:
        return CompressionLevel(raw.strip().lower())
    except ValueError:
        return DEFAULT_LEVEL


def get_level_settings(level: Optional[Union[str, CompressionLevel]]) -> LevelSettings:
    return LEVEL_POLICY[resolve_level(level)]
