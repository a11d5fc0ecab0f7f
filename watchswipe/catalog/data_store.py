from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from ..config import DEFAULT_APP_CONFIG
from ..recommendations.models import WatchRecord
from ..store.documents import WATCHES, DocumentStore

logger = logging.getLogger(__name__)

CATALOG_COLUMNS = ["id", "name", "brand", "price", "style", "image"]

_df: pd.DataFrame | None = None


def load_catalog(path: Path) -> pd.DataFrame:
    df = pd.read_csv(path, dtype={"id": str})
    df = df.reindex(columns=CATALOG_COLUMNS)

    # Pre-parse style tags into lists and lowercase for matching
    df["style"] = (
        df["style"]
        .fillna("")
        .astype(str)
        .apply(lambda s: [t.strip().lower() for t in s.split(",") if t.strip()])
    )
    df["price"] = pd.to_numeric(df["price"], errors="coerce").fillna(0.0)

    # Lowercased "name brand" string used by search
    df["search_text"] = (
        df["name"].fillna("").str.lower() + " " + df["brand"].fillna("").str.lower()
    )
    return df


def get_dataframe() -> pd.DataFrame:
    """Return the in-memory catalog DataFrame, loading it on first call."""
    global _df
    if _df is None:
        _df = load_catalog(DEFAULT_APP_CONFIG.catalog_path)
    return _df


def to_records(df: pd.DataFrame) -> list[WatchRecord]:
    return [
        WatchRecord(
            id=str(row["id"]),
            name=row["name"],
            brand=row["brand"],
            price=float(row["price"]),
            style=row["style"],
            image=row["image"] if isinstance(row["image"], str) else None,
        )
        for _, row in df.iterrows()
    ]


def seed_catalog(store: DocumentStore, df: pd.DataFrame | None = None) -> int:
    """Write every catalog row into the ``watches`` collection."""
    records = to_records(get_dataframe() if df is None else df)
    for record in records:
        store.set(WATCHES, record.id, record.model_dump(exclude={"id"}))
    logger.info("Seeded %d watches into the catalog", len(records))
    return len(records)


def fetch_all_watches(store: DocumentStore) -> list[WatchRecord]:
    """Return the whole catalog from the store, or [] if the read fails."""
    try:
        docs = store.query(WATCHES)
        return [WatchRecord(id=doc.id, **doc.data) for doc in docs]
    except Exception:
        logger.warning("Error fetching watches", exc_info=True)
        return []
