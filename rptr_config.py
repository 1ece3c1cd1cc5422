"""
Centralized configuration using Pydantic Settings.
Loads from environment variables and .env file.
"""
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Application
    APP_NAME: str = "rptr-etl"
    APP_VERSION: str = "0.3.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    
    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    
    # Fontes de repetidoras (local primeiro, remoto como fallback)
    REPEATERS_SOURCES: list[str] = [
        "rptrs.json",
        "https://radioid.net/static/rptrs.json",
    ]
    REPEATERS_CACHE_KEY: str = "radioid.net"
    
    # Base oficial de municípios
    CITIES_URL: str = "https://raw.githubusercontent.com/kelvins/Municipios-Brasileiros/main/json/municipios.json"
    CITIES_COMMITS_URL: str = "https://api.github.com/repos/kelvins/Municipios-Brasileiros/commits?path=json/municipios.json&per_page=1"
    CITIES_CACHE_PATH: str = "data/cidades/brasil.cidades.json"
    
    # Saída
    OUTPUT_DIR: str = "meta"
    CSV_DELIMITER: str = ","
    
    HTTP_TIMEOUT: float = 15.0
    
    # Heurísticas de inferência de cidade (valores empíricos)
    SIMILARITY_THRESHOLD: float = 0.9
    PREFIX_AMBIGUITY_LIMIT: int = 2
    SUBSTRING_AMBIGUITY_LIMIT: int = 3
    SUBSTRING_AMBIGUITY_MAX_LENGTH: int = 5
    
    # Alias de canal RT4D
    CHANNEL_ALIAS_TEMPLATE: str = "{{$AD}} {{$UF}} {{$CITY}}{{[ {{$COUNT}}]}}"
    
    @property
    def output_path(self) -> Path:
        """OUTPUT_DIR as a Path."""
        return Path(self.OUTPUT_DIR)

    @property
    def cities_cache_file(self) -> Path:
        return Path(self.CITIES_CACHE_PATH)


# Global settings instance
settings = Settings()
