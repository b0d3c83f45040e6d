import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_API_BASE = "http://localhost:3000"
DEFAULT_STORE_PATH = "~/.movieworld/storage.json"
DEFAULT_TIMEOUT = 7.0


@dataclass
class ClientConfig:
    api_base: str = DEFAULT_API_BASE
    store_path: Path = Path(DEFAULT_STORE_PATH).expanduser()
    timeout: float = DEFAULT_TIMEOUT
    news_api_key: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ClientConfig":
        load_dotenv()
        return cls(
            api_base=os.getenv("MOVIEWORLD_API_BASE", DEFAULT_API_BASE).rstrip("/"),
            store_path=Path(os.getenv("MOVIEWORLD_STORE_PATH", DEFAULT_STORE_PATH)).expanduser(),
            timeout=float(os.getenv("MOVIEWORLD_TIMEOUT", str(DEFAULT_TIMEOUT))),
            news_api_key=os.getenv("NEWS_API_KEY"),
        )
