"""Library settings using Pydantic Settings."""

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Rendering configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DOCX_FIELDMERGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"

    # Package layout (relative to word/)
    media_dir: str = "media"

    # Post-processing
    remove_trailing_blank_page: bool = True
    process_headers_and_footers: bool = True

    def configure_logging(self) -> None:
        """Configure logging for the library."""
        logging.basicConfig(
            level=self.log_level.upper(),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )


# Global settings instance; applications call settings.configure_logging()
settings = Settings()
