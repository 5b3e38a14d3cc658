from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from dictassist.engine.patterns import default_pattern_table, load_pattern_table
from dictassist.engine.schemas import PatternTable


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Local SQLite (macro store) ---
    sqlite_db_path: Path = Path("data/dictassist.db")

    # --- Detection ---
    auto_detect_modality: bool = False
    pattern_table_path: Path | None = None  # JSON; built-in tables when unset

    # --- Web interface ---
    web_host: str = "0.0.0.0"
    web_port: int = 8080

    log_level: str = "INFO"

    @property
    def sqlite_url(self) -> str:
        return f"sqlite:///{self.sqlite_db_path}"

    def load_patterns(self) -> PatternTable:
        """Pattern table from ``pattern_table_path``, or the built-in defaults."""
        if self.pattern_table_path:
            return load_pattern_table(self.pattern_table_path)
        return default_pattern_table()


settings = Settings()
