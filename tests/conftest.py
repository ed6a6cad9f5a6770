# tests/conftest.py
import os, sys
# project root first on sys.path so `offerte`, `web` and `cli` import without install
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest  # noqa: E402

from offerte.context import SiteConditions, load_rate_context  # noqa: E402
from offerte.correction import CorrectionFactorResolver  # noqa: E402
from offerte.models import Klant, Offerte  # noqa: E402
from offerte.repositories import NormHourRepository, ProductCatalog  # noqa: E402
from offerte.store import RecordStore  # noqa: E402

OWNER = "user_1"


@pytest.fixture
def store():
    """System defaults plus the default rate tables for OWNER."""
    s = RecordStore()
    CorrectionFactorResolver(s).initialize_system_defaults()
    NormHourRepository(s).seed_defaults(OWNER)
    ProductCatalog(s).seed_defaults(OWNER)
    return s


@pytest.fixture
def resolver(store):
    return CorrectionFactorResolver(store)


@pytest.fixture
def ctx(store):
    return load_rate_context(store, OWNER)


@pytest.fixture
def site():
    return SiteConditions()


@pytest.fixture
def quote():
    return Offerte(
        id="q1",
        owner_id=OWNER,
        nummer="OFF-2026-0001",
        type="aanleg",
        klant=Klant(naam="Familie de Vries", adres="Dorpsstraat 1", postcode="1234 AB", plaats="Utrecht"),
        scopes=["grondwerk", "bestrating"],
        scope_data={
            "grondwerk": {"oppervlakte": 15, "diepte": "standaard", "afvoer_grond": True},
            "bestrating": {"oppervlakte": 20, "type_bestrating": "tegel", "snijwerk": "gemiddeld"},
        },
    )
