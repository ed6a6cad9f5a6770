from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from offerte import __version__
from offerte.calculator import (
    OFFERTES,
    change_status,
    create_offerte,
    duplicate_offerte,
    find_offerte,
    get_offerte,
    list_offertes,
    recompute_quote,
    save_offerte,
    transition,
    update_offerte,
)
from offerte.config import config
from offerte.context import load_rate_context
from offerte.correction import CorrectionFactorResolver
from offerte.errors import ConfigurationError, NotFoundError, OfferteError, StatusTransitionError, ValidationError
from offerte.logging_config import setup_logging
from offerte.models import (
    AlgemeenParams,
    CorrectionFactor,
    Instellingen,
    Klant,
    NormHour,
    Offerte,
    OfferteStatus,
    OfferteType,
    OfferteWijziging,
    Product,
    SeedResult,
)
from offerte.repositories import InstellingenRepository, NormHourRepository, ProductCatalog
from offerte.store import RecordStore

logger = logging.getLogger(__name__)

store = RecordStore()


def get_store() -> RecordStore:
    return store


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config.log_level, config.log_json)
    if config.seed_on_startup:
        result = CorrectionFactorResolver(store).initialize_system_defaults()
        logger.info("%s (%d)", result.message, result.count)
    yield


app = FastAPI(title=config.app_name, version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _http_error(e: OfferteError) -> HTTPException:
    """Engine errors -> HTTP. ValidationError covers UnresolvedFactorError."""
    if isinstance(e, (ValidationError, StatusTransitionError)):
        detail: dict[str, Any] = {"error": type(e).__name__, "message": str(e)}
        if isinstance(e, ValidationError):
            detail.update(scope=e.scope, field=e.field)
        return HTTPException(status_code=400, detail=detail)
    if isinstance(e, ConfigurationError):
        return HTTPException(
            status_code=422,
            detail={"error": type(e).__name__, "message": str(e), "scope": e.scope, "key": e.key},
        )
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail={"error": type(e).__name__, "message": str(e)})
    logger.error("store failure: %s", e)
    return HTTPException(status_code=500, detail={"error": type(e).__name__, "message": str(e)})


def _is_stored(store: RecordStore, quote: Offerte) -> bool:
    record = store.get(OFFERTES, quote.id)
    if record is None:
        return False
    if record["owner_id"] != quote.owner_id:
        raise ValidationError(f"quote {quote.id} belongs to another owner", field="owner_id")
    return True


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "environment": config.environment}


# ---------- CORRECTION FACTORS ----------

class FactorUpsert(BaseModel):
    type: str
    waarde: str
    factor: float = Field(gt=0)


@app.get("/correctiefactoren", response_model=list[CorrectionFactor])
def list_correctiefactoren(owner_id: str | None = None, store: RecordStore = Depends(get_store)):
    return CorrectionFactorResolver(store).list_factors(owner_id)


@app.get("/correctiefactoren/resolve")
def resolve_correctiefactor(
    type: str,
    waarde: str,
    owner_id: str | None = None,
    store: RecordStore = Depends(get_store),
) -> dict[str, Any]:
    try:
        factor = CorrectionFactorResolver(store).resolve(type, waarde, owner_id)
    except OfferteError as e:
        raise _http_error(e)
    return {"type": type, "waarde": waarde, "factor": factor}


@app.put("/correctiefactoren/{owner_id}")
def upsert_correctiefactor(
    owner_id: str,
    body: FactorUpsert = Body(...),
    store: RecordStore = Depends(get_store),
) -> dict[str, str]:
    try:
        record_id = CorrectionFactorResolver(store).upsert(owner_id, body.type, body.waarde, body.factor)
    except OfferteError as e:
        raise _http_error(e)
    return {"id": record_id}


@app.delete("/correctiefactoren/{owner_id}/{type}/{waarde}")
def reset_correctiefactor(
    owner_id: str,
    type: str,
    waarde: str,
    store: RecordStore = Depends(get_store),
) -> dict[str, bool]:
    try:
        return {"reset": CorrectionFactorResolver(store).reset_to_default(owner_id, type, waarde)}
    except OfferteError as e:
        raise _http_error(e)


@app.post("/correctiefactoren/initialize", response_model=SeedResult)
def initialize_correctiefactoren(store: RecordStore = Depends(get_store)) -> SeedResult:
    return CorrectionFactorResolver(store).initialize_system_defaults()


# ---------- RATE TABLES PER USER ----------

@app.get("/normuren/{owner_id}", response_model=list[NormHour])
def list_normuren(owner_id: str, scope: str | None = None, store: RecordStore = Depends(get_store)):
    repo = NormHourRepository(store)
    return repo.list_by_scope(owner_id, scope) if scope else repo.list(owner_id)


@app.post("/normuren/{owner_id}/seed", response_model=SeedResult)
def seed_normuren(owner_id: str, store: RecordStore = Depends(get_store)) -> SeedResult:
    count = NormHourRepository(store).seed_defaults(owner_id)
    return SeedResult(message="Norm hours initialized" if count else "Norm hours already exist", count=count)


@app.get("/producten/{owner_id}", response_model=list[Product])
def list_producten(owner_id: str, alleen_actief: bool = False, store: RecordStore = Depends(get_store)):
    catalog = ProductCatalog(store)
    return catalog.list_active(owner_id) if alleen_actief else catalog.list(owner_id)


@app.post("/producten/{owner_id}/seed", response_model=SeedResult)
def seed_producten(owner_id: str, store: RecordStore = Depends(get_store)) -> SeedResult:
    count = ProductCatalog(store).seed_defaults(owner_id)
    return SeedResult(message="Products initialized" if count else "Products already exist", count=count)


@app.get("/instellingen/{owner_id}", response_model=Instellingen)
def get_instellingen(owner_id: str, store: RecordStore = Depends(get_store)) -> Instellingen:
    return InstellingenRepository(store).get(owner_id)


@app.put("/instellingen/{owner_id}", response_model=Instellingen)
def put_instellingen(
    owner_id: str,
    body: Instellingen = Body(...),
    store: RecordStore = Depends(get_store),
) -> Instellingen:
    repo = InstellingenRepository(store)
    repo.save(owner_id, body)
    return repo.get(owner_id)


# ---------- QUOTES ----------

class OfferteCreate(BaseModel):
    owner_id: str
    klant: Klant
    type: OfferteType = "aanleg"
    scopes: list[str] = []
    scope_data: dict[str, dict[str, Any]] = {}
    algemeen_params: AlgemeenParams = Field(default_factory=AlgemeenParams)
    marge_percentage: float | None = Field(default=None, ge=0)
    notities: str | None = None


@app.post("/offertes", response_model=Offerte)
def new_offerte(body: OfferteCreate = Body(...), store: RecordStore = Depends(get_store)) -> Offerte:
    try:
        ctx = load_rate_context(store, body.owner_id)
        return create_offerte(
            store,
            ctx,
            body.klant,
            type=body.type,
            scopes=body.scopes,
            scope_data=body.scope_data,
            algemeen_params=body.algemeen_params,
            marge_percentage=body.marge_percentage,
            notities=body.notities,
        )
    except OfferteError as e:
        raise _http_error(e)


@app.get("/offertes", response_model=list[Offerte])
def list_offertes_route(owner_id: str, store: RecordStore = Depends(get_store)) -> list[Offerte]:
    return list_offertes(store, owner_id)


@app.get("/offertes/nummer/{owner_id}/{nummer}", response_model=Offerte)
def get_offerte_by_nummer(owner_id: str, nummer: str, store: RecordStore = Depends(get_store)) -> Offerte:
    try:
        return find_offerte(store, owner_id, nummer)
    except OfferteError as e:
        raise _http_error(e)


@app.post("/offertes/recompute", response_model=Offerte)
def recompute_offerte(
    regenerate: bool = False,
    quote: Offerte = Body(...),
    store: RecordStore = Depends(get_store),
) -> Offerte:
    """
    Recompute regels/totalen for the posted quote.
    Manual lines survive unless regenerate=true. When the quote is a stored
    record, the result replaces it.
    """
    try:
        ctx = load_rate_context(store, quote.owner_id)
        result = recompute_quote(quote, ctx, regenerate=regenerate)
        if _is_stored(store, quote):
            save_offerte(store, result)
        return result
    except OfferteError as e:
        raise _http_error(e)


@app.post("/offertes/status", response_model=Offerte)
def change_status_posted(
    status: OfferteStatus,
    quote: Offerte = Body(...),
    store: RecordStore = Depends(get_store),
) -> Offerte:
    try:
        if _is_stored(store, quote):
            return change_status(store, quote.id, status)
        return transition(quote, status)
    except OfferteError as e:
        raise _http_error(e)


@app.get("/offertes/{quote_id}", response_model=Offerte)
def get_offerte_route(quote_id: str, store: RecordStore = Depends(get_store)) -> Offerte:
    try:
        return get_offerte(store, quote_id)
    except OfferteError as e:
        raise _http_error(e)


@app.patch("/offertes/{quote_id}", response_model=Offerte)
def update_offerte_route(
    quote_id: str,
    regenerate: bool = False,
    body: OfferteWijziging = Body(...),
    store: RecordStore = Depends(get_store),
) -> Offerte:
    """Edit the inputs of a stored quote; it is recomputed and saved."""
    try:
        ctx = load_rate_context(store, get_offerte(store, quote_id).owner_id)
        return update_offerte(store, ctx, quote_id, body, regenerate=regenerate)
    except OfferteError as e:
        raise _http_error(e)


@app.post("/offertes/{quote_id}/recompute", response_model=Offerte)
def recompute_stored_offerte(
    quote_id: str,
    regenerate: bool = False,
    store: RecordStore = Depends(get_store),
) -> Offerte:
    try:
        ctx = load_rate_context(store, get_offerte(store, quote_id).owner_id)
        return update_offerte(store, ctx, quote_id, regenerate=regenerate)
    except OfferteError as e:
        raise _http_error(e)


@app.post("/offertes/{quote_id}/status", response_model=Offerte)
def change_stored_status(quote_id: str, status: OfferteStatus, store: RecordStore = Depends(get_store)) -> Offerte:
    try:
        return change_status(store, quote_id, status)
    except OfferteError as e:
        raise _http_error(e)


@app.post("/offertes/{quote_id}/duplicate", response_model=Offerte)
def duplicate_offerte_route(quote_id: str, store: RecordStore = Depends(get_store)) -> Offerte:
    try:
        ctx = load_rate_context(store, get_offerte(store, quote_id).owner_id)
        return duplicate_offerte(store, ctx, quote_id)
    except OfferteError as e:
        raise _http_error(e)
