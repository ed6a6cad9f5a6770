# offerte/totals.py
# Regels -> Totalen. Percentages are percent numbers: 20 means 20%.

from __future__ import annotations

from typing import Literal, Mapping, Sequence

from .models import Regel, Totalen
from .rules import money


def aggregate(
    regels: Sequence[Regel],
    marge_percentage: float,
    btw_percentage: float,
    *,
    machine_post: Literal["arbeid", "materiaal"] = "arbeid",
    machine_uren_factureerbaar: bool = False,
    scope_marges: Mapping[str, float] | None = None,
) -> Totalen:
    """
    Margin per line: the line's own percentage, else its scope's entry in
    scope_marges, else the document margin. Manual lines follow the same rule.
    """
    scope_marges = scope_marges or {}
    materiaal = 0.0
    arbeid = 0.0
    uren = 0.0
    marge = 0.0

    for regel in regels:
        post = machine_post if regel.type == "machine" else regel.type
        if post == "materiaal":
            materiaal += regel.totaal
        else:
            arbeid += regel.totaal

        if regel.eenheid == "uur" and (regel.type == "arbeid" or machine_uren_factureerbaar):
            uren += regel.hoeveelheid

        pct = regel.marge_percentage
        if pct is None:
            pct = scope_marges.get(regel.scope, marge_percentage)
        marge += regel.totaal * pct / 100

    subtotaal = money(materiaal + arbeid)
    marge = money(marge)
    totaal_ex_btw = money(subtotaal + marge)
    btw = money(totaal_ex_btw * btw_percentage / 100)

    return Totalen(
        materiaalkosten=money(materiaal),
        arbeidskosten=money(arbeid),
        totaal_uren=round(uren, 2),
        subtotaal=subtotaal,
        marge=marge,
        marge_percentage=money(marge / subtotaal * 100) if subtotaal else marge_percentage,
        totaal_ex_btw=totaal_ex_btw,
        btw=btw,
        totaal_incl_btw=money(totaal_ex_btw + btw),
    )
