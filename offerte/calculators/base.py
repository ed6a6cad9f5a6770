# offerte/calculators/base.py
# Calculator registry and the fact builders every calculator shares.
# Rounding happens here, once: quarter hours for labor, QUANTITY_DECIMALS
# for materials. Nothing downstream re-rounds a quantity.

from __future__ import annotations

import logging
from typing import Any, Callable, Literal, NamedTuple

from pydantic import ValidationError as PydanticValidationError

from ..context import RateContext, SiteConditions
from ..errors import ConfigurationError, ValidationError
from ..models import QuantityFact
from ..rules import round_quantity, round_to_quarter
from ..scopes import ScopeInput

logger = logging.getLogger(__name__)

Categorie = Literal["aanleg", "onderhoud"]
Compute = Callable[[Any, SiteConditions, RateContext], list[QuantityFact]]


class ScopeCalculator(NamedTuple):
    scope: str
    model: type[ScopeInput]
    categorie: Categorie
    compute: Compute


CALCULATORS: dict[str, ScopeCalculator] = {}


def scope_calculator(scope: str, model: type[ScopeInput], categorie: Categorie):
    """Register a compute(input, site, ctx) function for one scope id."""

    def register(fn: Compute) -> Compute:
        CALCULATORS[scope] = ScopeCalculator(scope, model, categorie, fn)
        return fn

    return register


def get_calculator(scope: str) -> ScopeCalculator:
    try:
        return CALCULATORS[scope]
    except KeyError:
        raise ValidationError(f"unknown scope {scope!r}", scope=scope) from None


def parse_input(scope: str, raw: dict[str, Any] | ScopeInput) -> ScopeInput:
    calculator = get_calculator(scope)
    if isinstance(raw, calculator.model):
        return raw
    try:
        return calculator.model.model_validate(raw)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first["loc"]) or None
        raise ValidationError(first["msg"], scope=scope, field=field) from e


def compute_scope(
    scope: str,
    raw: dict[str, Any] | ScopeInput,
    site: SiteConditions,
    ctx: RateContext,
) -> list[QuantityFact]:
    """Parse, compute and drop facts that round to nothing."""
    calculator = get_calculator(scope)
    data = parse_input(scope, raw)
    try:
        facts = calculator.compute(data, site, ctx)
    except (ValidationError, ConfigurationError) as e:
        if e.scope is None:
            e.scope = scope
        raise
    kept = [f for f in facts if f.hoeveelheid > 0]
    logger.debug("scope %s: %d facts", scope, len(kept), extra={"scope": scope})
    return kept


# ---------- FACT BUILDERS ----------

def arbeid(omschrijving: str, uren: float, *, marge_percentage: float | None = None) -> QuantityFact:
    return QuantityFact(
        type="arbeid",
        omschrijving=omschrijving,
        eenheid="uur",
        hoeveelheid=round_to_quarter(uren),
        marge_percentage=marge_percentage,
    )


def materiaal(
    productnaam: str,
    omschrijving: str,
    hoeveelheid: float,
    eenheid: str,
    *,
    marge_percentage: float | None = None,
) -> QuantityFact:
    return QuantityFact(
        type="materiaal",
        omschrijving=omschrijving,
        eenheid=eenheid,
        hoeveelheid=round_quantity(hoeveelheid),
        sleutel=productnaam,
        marge_percentage=marge_percentage,
    )


def machine(sleutel: str, omschrijving: str, hoeveelheid: float, eenheid: str = "uur") -> QuantityFact:
    rounded = round_to_quarter(hoeveelheid) if eenheid == "uur" else round_quantity(hoeveelheid)
    return QuantityFact(
        type="machine",
        omschrijving=omschrijving,
        eenheid=eenheid,
        hoeveelheid=rounded,
        sleutel=sleutel,
    )
