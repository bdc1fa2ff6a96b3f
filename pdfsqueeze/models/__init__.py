from .common import CompressionLevel, EngineName
from .compress import HealthStatus, RemoteCompressionRequest

__all__ = [
    "CompressionLevel",
    "EngineName",
    "HealthStatus",
    "RemoteCompressionRequest",
]
