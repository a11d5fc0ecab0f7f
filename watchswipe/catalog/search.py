from __future__ import annotations

import pandas as pd

from ..recommendations.models import WatchRecord
from .data_store import get_dataframe, to_records


def search_watches(term: str, df: pd.DataFrame | None = None) -> list[WatchRecord]:
    """Watches whose "name brand" contains *term*, case-insensitively.

    An empty or blank term matches nothing.
    """
    needle = term.strip().lower()
    if not needle:
        return []
    df = get_dataframe() if df is None else df
    mask = df["search_text"].str.contains(needle, regex=False, na=False)
    return to_records(df.loc[mask])


def catalog_metadata(df: pd.DataFrame | None = None) -> dict[str, list[str]]:
    df = get_dataframe() if df is None else df
    brands = sorted(df["brand"].dropna().unique().tolist())
    styles: set[str] = set()
    for tags in df["style"]:
        styles.update(tags)
    return {"brands": brands, "styles": sorted(styles)}
