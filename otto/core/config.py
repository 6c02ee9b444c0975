"""
Configuration settings for the FastAPI application
"""
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "OTTO API"
    version: str = "1.0.0"
    environment: str = "development"
    debug: bool = True

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ]

    # OpenAI (vision analysis + DALL-E generation)
    openai_api_key: str = ""
    openai_vision_model: str = "gpt-4.1-mini"
    openai_vision_max_tokens: int = 500
    openai_image_model: str = "dall-e-3"
    openai_image_size: str = "1024x1024"
    openai_image_quality: str = "standard"
    openai_image_style: str = "natural"
    openai_timeout: float = 120.0

    # Google AI Studio (alternative image generation backend)
    google_ai_api_key: str = ""
    google_ai_image_model: str = "gemini-2.5-flash-image"
    google_ai_temperature: float = 0.4

    # "openai" or "gemini"
    image_generation_provider: str = "openai"

    # Image limits
    max_image_size_kb: int = 3500
    compression_max_dimension: int = 1024
    compression_quality: int = 70

    # Vision / generation endpoints used by the orchestrator.
    # Empty base URL routes the calls in-process to this application.
    external_api_base_url: str = ""
    analyze_image_path: str = "/api/analyze-image"
    generate_image_path: str = "/api/generate-image"
    external_call_timeout: Optional[float] = None

    # Orchestration timings (seconds)
    step_settle_delay: float = 0.3
    step_default_duration: float = 0.6
    search_step_duration: float = 1.2
    optimize_step_duration: float = 0.8
    pre_solution_delay: float = 0.5
    cart_item_delay: float = 0.3
    done_step_duration: float = 0.6

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from .env


# Global settings instance
settings = Settings()
