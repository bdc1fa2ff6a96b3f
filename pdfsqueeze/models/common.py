from enum import Enum


class CompressionLevel(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class EngineName(str, Enum):
    """وسم المحرك الذي نفّذ (أو حاول تنفيذ) عملية الضغط."""

    ghostscript = "ghostscript"
    mupdf = "mupdf"
