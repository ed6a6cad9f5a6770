"""Quick runtime checks for the offerte engine.
Run: python scripts/quickcheck.py
Exits with code 0 on success, non-zero on failure.
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from offerte.calculators import compute_scope  # noqa: E402
from offerte.context import SiteConditions, load_rate_context  # noqa: E402
from offerte.correction import CorrectionFactorResolver  # noqa: E402
from offerte.models import Regel  # noqa: E402
from offerte.repositories import NormHourRepository, ProductCatalog  # noqa: E402
from offerte.store import RecordStore  # noqa: E402
from offerte.totals import aggregate  # noqa: E402


def approx(a, b, tol=1e-6):
    return abs(a - b) <= tol


def main():
    store = RecordStore()
    CorrectionFactorResolver(store).initialize_system_defaults()
    NormHourRepository(store).seed_defaults("quickcheck")
    ProductCatalog(store).seed_defaults("quickcheck")
    ctx = load_rate_context(store, "quickcheck")

    facts = compute_scope(
        "grondwerk",
        {"oppervlakte": 15, "diepte": "standaard", "afvoer_grond": True},
        SiteConditions(),
        ctx,
    )
    ontgraven = next(f for f in facts if f.omschrijving.startswith("Ontgraven"))
    afvoer = next(f for f in facts if f.sleutel == "Afvoer grond (stort)")
    assert approx(ontgraven.hoeveelheid, 4.5)
    assert approx(afvoer.hoeveelheid, 3.75)

    regels = [
        Regel(id=f"x-{i}", scope="x", omschrijving="x", eenheid="stuk", hoeveelheid=1,
              prijs_per_eenheid=t, totaal=t, type="materiaal")
        for i, t in enumerate((100.00, 250.50, 40.00))
    ]
    totalen = aggregate(regels, 20, 21)
    assert approx(totalen.subtotaal, 390.50)
    assert approx(totalen.marge, 78.10)
    assert approx(totalen.totaal_ex_btw, 468.60)
    assert approx(totalen.btw, 98.41)
    assert approx(totalen.totaal_incl_btw, 567.01)

    print("Quickcheck OK")


if __name__ == '__main__':
    main()
