from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

_BUNDLED_CATALOG = Path(__file__).resolve().parent / "data" / "watches.csv"


@dataclass(frozen=True)
class AppConfig:
    session_secret: str = os.getenv("SESSION_SECRET", "watchswipe-secret-change-in-production")
    catalog_path: Path = Path(os.getenv("WATCH_CATALOG_PATH", str(_BUNDLED_CATALOG)))
    narrow_threshold: int = int(os.getenv("NARROW_THRESHOLD", "10"))
    top_style_count: int = 2
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    federated_jwt_secret: str = os.getenv("FEDERATED_JWT_SECRET", "watchswipe-federated-secret-change-in-production")
    federated_jwt_algorithms: tuple[str, ...] = tuple(
        os.getenv("FEDERATED_JWT_ALGORITHMS", "HS256").split(",")
    )
    federated_jwt_audience: str = os.getenv("FEDERATED_JWT_AUDIENCE", "watchswipe")


DEFAULT_APP_CONFIG = AppConfig()
