# offerte/synthesizer.py
# QuantityFacts -> priced Regels. Pure: prices come from the rate context,
# nothing is read from the store here.

from __future__ import annotations

from typing import Sequence

from .context import RateContext
from .errors import ConfigurationError
from .models import QuantityFact, Regel
from .rules import line_total, money


def _unit_price(fact: QuantityFact, scope: str, ctx: RateContext) -> float:
    if fact.type == "arbeid":
        return ctx.instellingen.uurtarief
    if fact.sleutel is None:
        raise ConfigurationError(f"{fact.type} line {fact.omschrijving!r} has no product or rate key", scope=scope)
    try:
        if fact.type == "materiaal":
            return money(ctx.product(fact.sleutel).prijs_per_eenheid)
        return ctx.machine_tarief(fact.sleutel)
    except ConfigurationError as e:
        e.scope = scope
        raise


def synthesize(facts_per_scope: Sequence[tuple[str, Sequence[QuantityFact]]], ctx: RateContext) -> list[Regel]:
    """Price every fact, in scope order and fact order."""
    regels: list[Regel] = []

    for scope, facts in facts_per_scope:
        for i, fact in enumerate(facts, start=1):
            prijs = _unit_price(fact, scope, ctx)
            regels.append(
                Regel(
                    id=f"{scope}-{i:03d}",
                    scope=scope,
                    omschrijving=fact.omschrijving,
                    eenheid=fact.eenheid,
                    hoeveelheid=fact.hoeveelheid,
                    prijs_per_eenheid=prijs,
                    totaal=line_total(fact.hoeveelheid, prijs),
                    type=fact.type,
                    marge_percentage=fact.marge_percentage,
                )
            )

    return regels
