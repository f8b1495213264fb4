from fastapi import Depends

from app.config import Settings, settings
from app.services.vision import VisionClient


def get_settings() -> Settings:
    return settings


def get_vision_client(app_settings: Settings = Depends(get_settings)) -> VisionClient:
    return VisionClient.from_settings(app_settings)
