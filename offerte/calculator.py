# offerte/calculator.py
# Quote document assembler: scope data in, regels and totalen out.

from __future__ import annotations

import logging
from typing import Any

from .calculators import compute_scope, get_calculator
from .context import RateContext, SiteConditions
from .errors import NotFoundError, StatusTransitionError, ValidationError
from .models import (
    AlgemeenParams,
    Klant,
    Offerte,
    OfferteStatus,
    OfferteType,
    OfferteWijziging,
    QuantityFact,
    utcnow,
)
from .store import RecordStore
from .synthesizer import synthesize
from .totals import aggregate

logger = logging.getLogger(__name__)

OFFERTES = "offertes"
NUMMERS = "offerte_nummers"

# once sent, a quote is a document of record; recompute starts a new version
FROZEN: frozenset[str] = frozenset({"verzonden", "geaccepteerd", "afgewezen"})

TRANSITIONS: dict[str, frozenset[str]] = {
    "concept": frozenset({"definitief"}),
    "definitief": frozenset({"concept", "verzonden"}),
    "verzonden": frozenset({"geaccepteerd", "afgewezen"}),
    "geaccepteerd": frozenset(),
    "afgewezen": frozenset(),
}


def recompute_quote(quote: Offerte, ctx: RateContext, *, regenerate: bool = False) -> Offerte:
    """
    Rebuild regels and totalen from scope_data.

    Derived lines are replaced in full. Manual lines (herkomst="handmatig")
    are carried over after them unless regenerate=True. The input quote is
    never modified; any error aborts before a result exists.
    """
    try:
        site = SiteConditions.resolve(quote.algemeen_params, ctx)
    except ValidationError as e:
        e.scope = e.scope or "algemeen"
        raise

    per_scope: list[tuple[str, list[QuantityFact]]] = []
    for scope in dict.fromkeys(quote.scopes):
        calculator = get_calculator(scope)
        if calculator.categorie != quote.type:
            raise ValidationError(f"scope {scope!r} does not belong to a {quote.type} quote", scope=scope)
        raw = quote.scope_data.get(scope)
        if raw is None:
            continue
        per_scope.append((scope, compute_scope(scope, raw, site, ctx)))

    regels = synthesize(per_scope, ctx)
    if not regenerate:
        regels += [r for r in quote.regels if r.herkomst == "handmatig"]

    instellingen = ctx.instellingen
    marge = quote.marge_percentage
    if marge is None:
        marge = instellingen.standaard_marge_percentage

    totalen = aggregate(
        regels,
        marge,
        instellingen.btw_percentage,
        machine_post=instellingen.machine_post,
        machine_uren_factureerbaar=instellingen.machine_uren_factureerbaar,
        scope_marges=instellingen.scope_marges,
    )

    update: dict[str, Any] = {"regels": regels, "totalen": totalen, "updated_at": utcnow()}
    if quote.status in FROZEN:
        update.update(status="concept", versie=quote.versie + 1)
        logger.info(
            "quote %s was %s; recompute starts version %d",
            quote.nummer or quote.id,
            quote.status,
            quote.versie + 1,
            extra={"quote_id": quote.id},
        )

    logger.info(
        "recomputed %s: %d regels, totaal incl. btw %.2f",
        quote.nummer or quote.id,
        len(regels),
        totalen.totaal_incl_btw,
        extra={"quote_id": quote.id},
    )
    return quote.model_copy(update=update)


def next_offerte_nummer(store: RecordStore, owner_id: str, prefix: str, year: int) -> str:
    """<prefix>-<year>-<nnnn>, sequential per owner and year."""
    with store.key_lock(NUMMERS, owner_id, year):
        counter = store.unique(NUMMERS, owner_id=owner_id, jaar=year)
        if counter is None:
            volgnummer = 1
            store.insert(NUMMERS, {"owner_id": owner_id, "jaar": year, "laatste": volgnummer})
        else:
            volgnummer = counter["laatste"] + 1
            store.patch(NUMMERS, counter["id"], laatste=volgnummer)
    return f"{prefix}-{year}-{volgnummer:04d}"


def create_offerte(
    store: RecordStore,
    ctx: RateContext,
    klant: Klant,
    *,
    type: OfferteType = "aanleg",
    scopes: list[str] | None = None,
    scope_data: dict[str, dict[str, Any]] | None = None,
    algemeen_params: AlgemeenParams | None = None,
    marge_percentage: float | None = None,
    notities: str | None = None,
) -> Offerte:
    """New concept quote with a fresh number, computed once and stored."""
    if ctx.owner_id is None:
        raise ValidationError("a quote needs an owner", field="owner_id")

    for scope in scopes or []:
        if get_calculator(scope).categorie != type:
            raise ValidationError(f"scope {scope!r} does not belong to a {type} quote", scope=scope)

    now = utcnow()
    draft = Offerte(
        id="new",
        owner_id=ctx.owner_id,
        nummer=next_offerte_nummer(store, ctx.owner_id, ctx.instellingen.offerte_nummer_prefix, now.year),
        type=type,
        klant=klant,
        algemeen_params=algemeen_params or AlgemeenParams(),
        scopes=scopes or [],
        scope_data=scope_data or {},
        marge_percentage=marge_percentage,
        notities=notities,
        created_at=now,
        updated_at=now,
    )
    return _insert(store, recompute_quote(draft, ctx))


def transition(quote: Offerte, status: OfferteStatus) -> Offerte:
    allowed = TRANSITIONS[quote.status]
    if status not in allowed:
        raise StatusTransitionError(
            f"quote {quote.nummer or quote.id}: {quote.status} -> {status} is not allowed"
            + (f" (allowed: {', '.join(sorted(allowed))})" if allowed else "")
        )
    logger.info("quote %s: %s -> %s", quote.nummer or quote.id, quote.status, status, extra={"quote_id": quote.id})
    return quote.model_copy(update={"status": status, "updated_at": utcnow()})


# ---------- PERSISTENCE ----------

# never rewritten after insert
IDENTITY_FIELDS = frozenset({"id", "owner_id", "nummer", "created_at"})


def _insert(store: RecordStore, quote: Offerte) -> Offerte:
    record_id = store.insert(OFFERTES, quote.model_dump(mode="json", exclude={"id"}))
    logger.info("stored quote %s for %s", quote.nummer, quote.owner_id, extra={"quote_id": record_id})
    return quote.model_copy(update={"id": record_id})


def _load(store: RecordStore, quote_id: str) -> Offerte:
    record = store.get(OFFERTES, quote_id)
    if record is None:
        raise NotFoundError(f"quote {quote_id} not found")
    return Offerte.model_validate(record)


def _write(store: RecordStore, quote: Offerte) -> Offerte:
    store.patch(OFFERTES, quote.id, **quote.model_dump(mode="json", exclude=set(IDENTITY_FIELDS)))
    return quote


def get_offerte(store: RecordStore, quote_id: str) -> Offerte:
    return _load(store, quote_id)


def find_offerte(store: RecordStore, owner_id: str, nummer: str) -> Offerte:
    record = store.unique(OFFERTES, owner_id=owner_id, nummer=nummer)
    if record is None:
        raise NotFoundError(f"quote {nummer} not found for {owner_id}")
    return Offerte.model_validate(record)


def list_offertes(store: RecordStore, owner_id: str) -> list[Offerte]:
    quotes = [Offerte.model_validate(r) for r in store.query(OFFERTES, owner_id=owner_id)]
    return sorted(quotes, key=lambda q: q.nummer)


def save_offerte(store: RecordStore, quote: Offerte) -> Offerte:
    """
    Replace the stored document with `quote`: regels, totalen, status and
    versie in full, inputs included. Concurrent saves serialize on the quote
    id and the last write wins.
    """
    with store.key_lock(OFFERTES, quote.id):
        _load(store, quote.id)
        return _write(store, quote)


def _check_owner(quote: Offerte, ctx: RateContext) -> None:
    if ctx.owner_id != quote.owner_id:
        raise ValidationError(
            f"rates of {ctx.owner_id} cannot price a quote of {quote.owner_id}",
            field="owner_id",
        )


def update_offerte(
    store: RecordStore,
    ctx: RateContext,
    quote_id: str,
    wijziging: OfferteWijziging | None = None,
    *,
    regenerate: bool = False,
) -> Offerte:
    """
    Load, apply the edited inputs, recompute and save, as one step per quote.
    Without a wijziging this just recomputes the stored document against
    the current rates.
    """
    with store.key_lock(OFFERTES, quote_id):
        stored = _load(store, quote_id)
        _check_owner(stored, ctx)
        if wijziging is not None:
            stored = Offerte.model_validate(
                {**stored.model_dump(), **wijziging.model_dump(exclude_unset=True)}
            )
        return _write(store, recompute_quote(stored, ctx, regenerate=regenerate))


def change_status(store: RecordStore, quote_id: str, status: OfferteStatus) -> Offerte:
    with store.key_lock(OFFERTES, quote_id):
        return _write(store, transition(_load(store, quote_id), status))


def duplicate_offerte(store: RecordStore, ctx: RateContext, quote_id: str) -> Offerte:
    """A new concept quote with the same inputs and manual lines under a fresh number."""
    source = _load(store, quote_id)
    _check_owner(source, ctx)

    now = utcnow()
    dup = source.model_copy(
        update={
            "id": "new",
            "nummer": next_offerte_nummer(store, source.owner_id, ctx.instellingen.offerte_nummer_prefix, now.year),
            "status": "concept",
            "versie": 1,
            "created_at": now,
            "updated_at": now,
        },
        deep=True,
    )
    logger.info("duplicating %s as %s", source.nummer, dup.nummer, extra={"quote_id": source.id})
    return _insert(store, recompute_quote(dup, ctx))
