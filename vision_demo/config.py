from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    detection_model: str = 'yolo'
    classification_model: str = 'resnet'
    confidence_threshold: float = 0.5
    detection_step_delay_ms: int = 800
    classification_step_delay_ms: int = 700
    max_image_bytes: int = 8 * 1024 * 1024
    report_title: str = 'Computer Vision Analysis Report'
    report_author: str = 'Vision Demo Platform'
    feature_point_count: int = 20
    host: str = '127.0.0.1'
    port: int = 8001
    log_level: str = 'INFO'
    version: str = '1.0.0'


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
