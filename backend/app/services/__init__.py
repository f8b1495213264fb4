from app.services.vision import (
    InvalidUpstreamPayload,
    VisionClient,
    VisionError,
    VisionNotConfigured,
    VisionProviderError,
)

__all__ = [
    "InvalidUpstreamPayload",
    "VisionClient",
    "VisionError",
    "VisionNotConfigured",
    "VisionProviderError",
]
