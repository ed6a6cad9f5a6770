# cli/app.py
# CLI = a thin surface over the offerte engine. It can be replaced by the
# web API without touching offerte/.

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path

from offerte.calculator import recompute_quote
from offerte.config import config
from offerte.context import load_rate_context
from offerte.correction import CorrectionFactorResolver
from offerte.errors import OfferteError
from offerte.logging_config import setup_logging
from offerte.models import Offerte
from offerte.repositories import NormHourRepository, ProductCatalog
from offerte.store import RecordStore


# ---------- INPUT HELPERS ----------

def ask_yes_no(prompt: str) -> bool:
    """Keeps asking until the answer is y or n."""
    while True:
        raw = input(prompt + " (y/n): ").strip().lower()
        if raw in ("y", "yes", "j", "ja"):
            return True
        if raw in ("n", "no", "nee"):
            return False
        print("❌ Enter y or n")


def money(x: float) -> str:
    return f"€ {x:,.2f}"


# ---------- HISTORY (JSON) ----------

def save_quote_json(quote: Offerte) -> Path:
    """
    Saves the computed quote as JSON under data/history/.
    Returns the path of the new file.
    """
    root = Path(__file__).resolve().parents[1]
    history_dir = root / "data" / "history"
    history_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().isoformat(timespec="seconds").replace(":", "").replace("-", "")
    klant = quote.klant.naam.strip().lower().replace(" ", "_") or "klant"
    nummer = quote.nummer or quote.id

    path = history_dir / f"{ts}_{nummer}_v{quote.versie}_{klant}.json"
    path.write_text(quote.model_dump_json(indent=2), encoding="utf-8")
    return path


def load_quote(path: Path) -> Offerte:
    return Offerte.model_validate_json(path.read_text(encoding="utf-8"))


def seeded_store(owner_id: str) -> RecordStore:
    """A store with the default rate tables for one user."""
    store = RecordStore()
    CorrectionFactorResolver(store).initialize_system_defaults()
    NormHourRepository(store).seed_defaults(owner_id)
    ProductCatalog(store).seed_defaults(owner_id)
    return store


# ---------- OUTPUT ----------

def print_breakdown(quote: Offerte) -> None:
    t = quote.totalen
    print("\n--- Offerte ---")
    print(f"Nummer:        {quote.nummer or '-'} (versie {quote.versie}, {quote.status})")
    print(f"Klant:         {quote.klant.naam}")
    if quote.klant.adres:
        print(f"Adres:         {quote.klant.adres}, {quote.klant.postcode} {quote.klant.plaats}")
    print(f"Type:          {quote.type}")

    scope = None
    for regel in quote.regels:
        if regel.scope != scope:
            scope = regel.scope
            print(f"\n[{scope}]")
        marker = " *" if regel.herkomst == "handmatig" else ""
        print(
            f"  {regel.omschrijving:<48} {regel.hoeveelheid:>8.2f} {regel.eenheid:<6}"
            f" x {money(regel.prijs_per_eenheid):>11} = {money(regel.totaal):>12}{marker}"
        )

    print("\n--- Totalen ---")
    print(f"Materiaal:     {money(t.materiaalkosten)}")
    print(f"Arbeid:        {money(t.arbeidskosten)} ({t.totaal_uren:.2f} uur)")
    print(f"Subtotaal:     {money(t.subtotaal)}")
    print(f"Marge:         {money(t.marge)} ({t.marge_percentage:.2f}%)")
    print(f"Totaal ex BTW: {money(t.totaal_ex_btw)}")
    print(f"BTW:           {money(t.btw)}")
    print(f"TOTAAL:        {money(t.totaal_incl_btw)}")
    print("---------------\n")


# ---------- MAIN ----------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="offerte", description="Recompute a hovenier quote from a JSON file.")
    parser.add_argument("quote", type=Path, help="quote JSON (an Offerte document)")
    parser.add_argument("--regenerate", action="store_true", help="drop manual lines and rebuild everything")
    parser.add_argument("--save", action="store_true", help="save to data/history without asking")
    parser.add_argument("--no-save", action="store_true", help="never ask to save")
    return parser


def run_cli(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(config.log_level, config.log_json)

    try:
        quote = load_quote(args.quote)
        store = seeded_store(quote.owner_id)
        ctx = load_rate_context(store, quote.owner_id)
        result = recompute_quote(quote, ctx, regenerate=args.regenerate)
    except OfferteError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    print_breakdown(result)

    if args.save or (not args.no_save and ask_yes_no("Save quote to history (JSON)?")):
        path = save_quote_json(result)
        print(f"✅ Saved JSON: {path}\n")
    return 0


if __name__ == "__main__":
    sys.exit(run_cli())
