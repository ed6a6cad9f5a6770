# offerte/seeds.py
# Seed sets for the rate tables, read from offerte/data/*.json.

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

DATA_DIR = Path(__file__).resolve().parent / "data"


def _read(name: str) -> list[dict]:
    return json.loads((DATA_DIR / name).read_text(encoding="utf-8"))


@lru_cache(maxsize=1)
def load_correction_seeds() -> tuple[dict, ...]:
    """System-default correction factors: {type, waarde, factor}."""
    rows = _read("correctiefactoren.json")
    return tuple(
        {"type": r["type"], "waarde": r["waarde"], "factor": float(r["factor"])}
        for r in rows
    )


@lru_cache(maxsize=1)
def load_normuren_seeds() -> tuple[dict, ...]:
    rows = _read("normuren.json")
    return tuple(
        {
            "activiteit": r["activiteit"],
            "scope": r["scope"],
            "normuur_per_eenheid": float(r["normuur_per_eenheid"]),
            "eenheid": r["eenheid"],
            "omschrijving": r.get("omschrijving"),
        }
        for r in rows
    )


@lru_cache(maxsize=1)
def load_product_seeds() -> tuple[dict, ...]:
    rows = _read("producten.json")
    return tuple(
        {
            "productnaam": r["productnaam"],
            "categorie": r["categorie"],
            "inkoopprijs": float(r["inkoopprijs"]),
            "verkoopprijs": float(r["verkoopprijs"]),
            "eenheid": r["eenheid"],
            "leverancier": r.get("leverancier"),
            "verliespercentage": float(r.get("verliespercentage", 0.0)),
        }
        for r in rows
    )
