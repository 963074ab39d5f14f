"""
Application settings read from the environment (and a local .env file).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from dotenv import load_dotenv

load_dotenv()

DEFAULT_MODEL: Final[str] = "gemini-3-flash-preview"
DEFAULT_DATA_DIR: Final[Path] = Path("data")


@dataclass(frozen=True)
class Settings:
    api_key: str = ""
    model: str = DEFAULT_MODEL
    data_dir: Path = DEFAULT_DATA_DIR
    locale: str = "fr"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", ""),
            model=os.getenv("NOVA_MODEL", DEFAULT_MODEL),
            data_dir=Path(os.getenv("NOVA_DATA_DIR", str(DEFAULT_DATA_DIR))),
            locale=os.getenv("NOVA_LOCALE", "fr"),
            log_level=os.getenv("NOVA_LOG_LEVEL", "INFO"),
        )

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    def ensure_data_dir(self) -> Path:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        return self.data_dir
