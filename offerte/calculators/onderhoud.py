# offerte/calculators/onderhoud.py
# Maintenance scopes. Backlog (achterstalligheid) scales the recurring
# work: mowing, weeding and pruning.

from __future__ import annotations

import math

from ..context import RateContext, SiteConditions
from ..models import QuantityFact
from ..scopes import (
    BemestingInput,
    BomenInput,
    BordersOnderhoudInput,
    GazonanalyseInput,
    GrasOnderhoudInput,
    HeggenInput,
    MollenbestrijdingInput,
    OverigInput,
    ReinigingInput,
)
from .base import arbeid, machine, materiaal, scope_calculator

GROENAFVAL_M3_PER_M2 = 0.05

# hedge trimmings are loose material, roughly a third of the hedge volume
SNOEISEL_VOLUME_FRACTIE = 0.3
HOOGWERKER_VERPLICHT_BOVEN_M = 4
HOOGWERKER_METERS_PER_DAG = 10

HAAGSOORT_FACTOR = {
    "liguster": 1.0,
    "beuk": 1.0,
    "taxus": 1.3,
    "conifeer": 1.4,
    "buxus": 0.8,
}
ONDERGROND_FACTOR = {
    "bestrating": 1.15,
    "gras": 1.0,
    "grind": 1.0,
    "border": 1.05,
}

BOOM_HOOGTE_FACTOR = {
    "laag": 1.0,
    "middel": 1.0,
    "hoog": 1.5,
    "zeer_hoog": 2.5,
}
VEILIGHEID_TOESLAG = {
    "nabij_straat": 0.20,
    "nabij_gebouw": 0.10,
    "nabij_kabels": 0.15,
}
INSPECTIE_VISUEEL_UREN = 0.5
SNOEIHOUT_UREN_PER_M2_KROON = 0.1

TERRAS_TYPE_FACTOR = {
    "keramisch": 0.9,
    "beton": 1.0,
    "klinkers": 1.1,
    "natuursteen": 1.2,
    "hout": 1.3,
}
BLADRUIMEN_UREN_PER_M2 = {"eenmalig": 0.02, "seizoen": 0.005}
BLADRUIMEN_BEURTEN = {"eenmalig": 1, "seizoen": 4}
ONKRUID_UREN_PER_M2 = {
    "handmatig": 0.04,
    "branden": 0.02,
    "heet_water": 0.015,
    "chemisch": 0.01,
}
ONKRUID_MACHINE = {"branden": "onkruidbrander", "heet_water": "heetwaterapparaat"}
ALGE_UREN_PER_M2 = 0.03

BEMESTING_MARGE_PERCENTAGE = 70
BEMESTING_UREN_PER_M2 = 0.005
KALK_UREN_PER_M2 = 0.003
HERHAALKORTING = 0.9

GAZONBEOORDELING_UREN = 0.5
# herstelactie: (uren per m², product)
GAZONHERSTEL = {
    "verticuteren": (0.01, None),
    "doorzaaien": (0.005, "Graszaad doorzaaien"),
    "nieuwe_grasmat": (0.02, "Graszoden (nieuwe grasmat)"),
    "plaggen": (0.025, None),
}
VERTICUTEER_M2_PER_DAG = 500
PLAGSEL_M3_PER_M2 = 0.05
PLAGSEL_AFVOER_UREN_PER_M3 = 0.1
KALE_PLEKKEN_FRACTIE = 0.1
BIJZAAIEN_UREN_PER_M2 = 0.01

# pakket: (installatie-uren, product, uren controlebezoeken)
MOLLEN_PAKKETTEN = {
    "basis": (2.0, "Mollenklemmen basis", 0.5),
    "premium": (4.5, "Mollenklemmen premium", 1.5),
    "premium_plus": (6.0, "Mollenklemmen premium plus", 3.0),
}
GAZONHERSTEL_UREN_PER_M2 = 0.02
GAAS_UREN_PER_M2 = 0.05
TERUGKEER_CHECK_UREN = 1.0

OVERIG_BLADRUIMEN_UREN = 2.0
OVERIG_TERRAS_UREN_PER_M2 = 0.05
OVERIG_ONKRUID_UREN_PER_M2 = 0.03
AFWATERINGSPUNT_UREN = 0.25


def _frequentie(aantal: int) -> str:
    return "" if aantal == 1 else f" ({aantal}x per jaar)"


@scope_calculator("gras_onderhoud", GrasOnderhoudInput, "onderhoud")
def gras_onderhoud(data: GrasOnderhoudInput, site: SiteConditions, ctx: RateContext) -> list[QuantityFact]:
    opp = data.oppervlakte
    if opp == 0:
        return []

    facts = []
    if data.maaien:
        uren = opp * ctx.norm("gras_onderhoud", "Maaien") * site.bereikbaarheid * site.achterstalligheid
        facts.append(arbeid("Gazon maaien", uren))
    if data.kanten_steken:
        omtrek = 4 * math.sqrt(opp)
        uren = omtrek * ctx.norm("gras_onderhoud", "Kanten steken") * site.bereikbaarheid * site.achterstalligheid
        facts.append(arbeid("Graskanten steken", uren))
    if data.verticuteren:
        uren = opp * ctx.norm("gras_onderhoud", "Verticuteren") * site.bereikbaarheid
        facts.append(arbeid("Verticuteren", uren))
    return facts


@scope_calculator("borders_onderhoud", BordersOnderhoudInput, "onderhoud")
def borders_onderhoud(data: BordersOnderhoudInput, site: SiteConditions, ctx: RateContext) -> list[QuantityFact]:
    intensiteit = ctx.factor("intensiteit", data.onderhoudsintensiteit)
    bodem = ctx.factor("bodem", data.bodem)
    opp = data.oppervlakte
    if opp == 0:
        return []

    facts = []
    if data.onkruid_verwijderen:
        norm = ctx.norm("borders_onderhoud", f"Wieden {data.onderhoudsintensiteit}")
        uren = opp * norm * site.bereikbaarheid * site.achterstalligheid * bodem
        facts.append(arbeid(f"Onkruid wieden ({data.onderhoudsintensiteit}, bodem {data.bodem})", uren))

    if data.snoei != "geen":
        norm = ctx.norm("borders_onderhoud", f"Snoei {data.snoei}")
        uren = opp * norm * site.bereikbaarheid * site.achterstalligheid * intensiteit
        facts.append(arbeid(f"Snoeien beplanting ({data.snoei})", uren))

    if data.afvoer_groenafval:
        volume = opp * GROENAFVAL_M3_PER_M2 * intensiteit
        facts.append(materiaal("Afvoer groenafval", "Afvoer groenafval", volume, "m³"))

    return facts


def _hoogteklasse(hoogte: float) -> str:
    if hoogte > 3:
        return "hoog"
    if hoogte > 2:
        return "middel"
    return "laag"


@scope_calculator("heggen", HeggenInput, "onderhoud")
def heggen(data: HeggenInput, site: SiteConditions, ctx: RateContext) -> list[QuantityFact]:
    snoei_factor = ctx.factor("snoei", data.snoei)
    hoogte_factor = ctx.factor("hoogte", _hoogteklasse(data.hoogte))
    volume = data.lengte * data.hoogte * data.breedte
    if volume == 0:
        return []

    freq = data.snoeifrequentie
    soort = HAAGSOORT_FACTOR[data.haagsoort] if data.haagsoort else 1.0
    ondergrond = ONDERGROND_FACTOR[data.ondergrond] if data.ondergrond else 1.0

    per_beurt = (
        volume
        * ctx.norm("heggen_onderhoud", "Heg snoeien")
        * site.bereikbaarheid
        * site.achterstalligheid
        * snoei_factor
        * hoogte_factor
        * soort
        * ondergrond
    )
    omschrijving = (
        f"Heg snoeien {data.lengte:g}m × {data.hoogte:g}m × {data.breedte:g}m ({data.snoei})"
        + _frequentie(freq)
    )
    facts = [arbeid(omschrijving, per_beurt * freq)]

    if data.afvoer_snoeisel:
        snoeisel = volume * SNOEISEL_VOLUME_FRACTIE * freq
        uren = snoeisel * ctx.norm("heggen_onderhoud", "Snoeisel afvoeren") * site.bereikbaarheid
        facts.append(arbeid("Snoeisel afvoeren", uren))
        facts.append(materiaal("Afvoer groenafval", "Afvoer snoeisel", snoeisel, "m³"))

    if data.hoogwerker_nodig or data.hoogte > HOOGWERKER_VERPLICHT_BOVEN_M:
        dagen = math.ceil(data.lengte / HOOGWERKER_METERS_PER_DAG) * freq
        facts.append(machine("hoogwerker", "Hoogwerker huur", dagen, eenheid="dag"))

    return facts


@scope_calculator("bomen", BomenInput, "onderhoud")
def bomen(data: BomenInput, site: SiteConditions, ctx: RateContext) -> list[QuantityFact]:
    n = data.aantal_bomen
    if n == 0:
        return []

    veiligheid = 1 + sum(toeslag for veld, toeslag in VEILIGHEID_TOESLAG.items() if getattr(data, veld))
    uren = (
        n
        * ctx.norm("bomen_onderhoud", f"Boom snoeien {data.snoei}")
        * site.bereikbaarheid
        * site.achterstalligheid
        * BOOM_HOOGTE_FACTOR[data.hoogteklasse]
        * veiligheid
    )
    facts = [arbeid(f"Bomen snoeien ({data.snoei}, {data.hoogteklasse.replace('_', ' ')}) {n}x", uren)]

    if data.inspectie == "visueel":
        facts.append(arbeid("Visuele boominspectie", n * INSPECTIE_VISUEEL_UREN * site.bereikbaarheid))
    elif data.inspectie == "gecertificeerd":
        facts.append(
            materiaal("Boominspectie (gecertificeerd)", "Gecertificeerde boominspectie", n, "boom")
        )

    if data.afvoer:
        uren = data.kroondiameter ** 2 * SNOEIHOUT_UREN_PER_M2_KROON * n * site.bereikbaarheid
        facts.append(arbeid("Snoeihout afvoeren", uren))

    return facts


@scope_calculator("reiniging", ReinigingInput, "onderhoud")
def reiniging(data: ReinigingInput, site: SiteConditions, ctx: RateContext) -> list[QuantityFact]:
    facts: list[QuantityFact] = []

    if data.terras_reinigen and data.terras_oppervlakte > 0:
        opp = data.terras_oppervlakte
        type_factor = TERRAS_TYPE_FACTOR[data.terras_type] if data.terras_type else 1.0
        uren = opp * ctx.norm("overig_onderhoud", "Terras reinigen") * type_factor * site.bereikbaarheid
        facts.append(arbeid(f"Terras reinigen ({data.terras_type or 'standaard'})", uren))
        facts.append(materiaal("Reinigingsmiddel", "Reinigingsmiddel terras", opp, "m²"))

    if data.bladruimen and data.bladruimen_oppervlakte > 0:
        beurten = BLADRUIMEN_BEURTEN[data.bladruimen_type]
        uren = data.bladruimen_oppervlakte * BLADRUIMEN_UREN_PER_M2[data.bladruimen_type] * beurten * site.bereikbaarheid
        facts.append(arbeid(f"Bladruimen ({data.bladruimen_type})", uren))

    if data.onkruid_bestrating and data.onkruid_oppervlakte > 0:
        opp = data.onkruid_oppervlakte
        methode = data.onkruid_methode
        uren = opp * ONKRUID_UREN_PER_M2[methode] * site.bereikbaarheid * site.achterstalligheid
        facts.append(arbeid(f"Onkruid bestrating ({methode.replace('_', ' ')})", uren))
        if methode in ONKRUID_MACHINE:
            sleutel = ONKRUID_MACHINE[methode]
            facts.append(machine(sleutel, f"Huur {sleutel}", 1, eenheid="dag"))
        elif methode == "chemisch":
            facts.append(materiaal("Onkruidbestrijdingsmiddel", "Onkruidbestrijdingsmiddel", opp, "m²"))

    if data.algereiniging and data.alge_oppervlakte > 0:
        opp = data.alge_oppervlakte
        facts.append(arbeid("Algereiniging", opp * ALGE_UREN_PER_M2 * site.bereikbaarheid))
        facts.append(materiaal("Anti-alg middel", "Anti-alg middel", opp, "m²"))

    return facts


@scope_calculator("bemesting", BemestingInput, "onderhoud")
def bemesting(data: BemestingInput, site: SiteConditions, ctx: RateContext) -> list[QuantityFact]:
    opp = data.oppervlakte
    if opp == 0:
        return []

    marge = BEMESTING_MARGE_PERCENTAGE
    freq = data.frequentie
    korting = HERHAALKORTING if freq >= 2 else 1.0

    uren = opp * BEMESTING_UREN_PER_M2 * freq * korting * site.bereikbaarheid
    productnaam = f"Bemesting {data.bemestingstype}"
    facts = [
        arbeid(f"Bemesten ({data.bemestingstype})" + _frequentie(freq), uren, marge_percentage=marge),
        materiaal(productnaam, productnaam + _frequentie(freq), opp * freq, "m²", marge_percentage=marge),
    ]

    if data.kalkbehandeling:
        facts.append(arbeid("Kalk strooien", opp * KALK_UREN_PER_M2 * site.bereikbaarheid, marge_percentage=marge))
        facts.append(materiaal("Kalk", "Kalk", opp, "m²", marge_percentage=marge))

    if data.grondanalyse:
        facts.append(materiaal("Grondanalyse", "Grondanalyse", 1, "analyse", marge_percentage=marge))

    return facts


@scope_calculator("gazonanalyse", GazonanalyseInput, "onderhoud")
def gazonanalyse(data: GazonanalyseInput, site: SiteConditions, ctx: RateContext) -> list[QuantityFact]:
    opp = data.oppervlakte
    if opp == 0:
        return []

    facts = [arbeid("Gazonbeoordeling ter plaatse", GAZONBEOORDELING_UREN)]

    for actie in ("verticuteren", "doorzaaien", "nieuwe_grasmat", "plaggen"):
        if actie not in data.herstelacties:
            continue
        uren_per_m2, productnaam = GAZONHERSTEL[actie]
        facts.append(arbeid(actie.replace("_", " ").capitalize(), opp * uren_per_m2 * site.bereikbaarheid))
        if productnaam:
            facts.append(materiaal(productnaam, productnaam, opp, "m²"))
        if actie == "verticuteren":
            dagen = max(1, math.ceil(opp / VERTICUTEER_M2_PER_DAG))
            facts.append(machine("verticuteermachine", "Verticuteermachine huur", dagen, eenheid="dag"))
        elif actie == "plaggen":
            plagsel = opp * PLAGSEL_M3_PER_M2
            facts.append(arbeid("Plagsel afvoeren", plagsel * PLAGSEL_AFVOER_UREN_PER_M3 * site.bereikbaarheid))

    if "bijzaaien" in data.herstelacties:
        kaal = data.kale_plekken_m2 if data.kale_plekken_m2 is not None else math.ceil(opp * KALE_PLEKKEN_FRACTIE)
        facts.append(arbeid("Bijzaaien kale plekken", kaal * BIJZAAIEN_UREN_PER_M2 * site.bereikbaarheid))
        facts.append(materiaal("Graszaad herstel", "Graszaad kale plekken", kaal, "m²"))

    if data.bekalken:
        facts.append(arbeid("Bekalken gazon", opp * KALK_UREN_PER_M2 * site.bereikbaarheid))
        facts.append(materiaal("Kalk", "Kalk gazon", opp, "m²"))

    return facts


@scope_calculator("mollenbestrijding", MollenbestrijdingInput, "onderhoud")
def mollenbestrijding(data: MollenbestrijdingInput, site: SiteConditions, ctx: RateContext) -> list[QuantityFact]:
    installatie, productnaam, controle = MOLLEN_PAKKETTEN[data.pakket]
    pakket = data.pakket.replace("_", " ")

    facts = [
        arbeid(f"Mollenbestrijding {pakket}: plaatsen klemmen", installatie * site.bereikbaarheid),
        materiaal(productnaam, productnaam, 1, "set"),
        arbeid(f"Mollenbestrijding {pakket}: controlebezoeken", controle * site.bereikbaarheid),
    ]

    if data.gazonherstel_m2 > 0:
        m2 = data.gazonherstel_m2
        facts.append(arbeid("Gazonherstel molshopen", m2 * GAZONHERSTEL_UREN_PER_M2 * site.bereikbaarheid))
        facts.append(materiaal("Graszaad herstel", "Graszaad herstel", m2, "m²"))

    if data.preventief_gaas_m2 > 0:
        m2 = data.preventief_gaas_m2
        facts.append(arbeid("Mollengaas plaatsen", m2 * GAAS_UREN_PER_M2 * site.bereikbaarheid))
        facts.append(materiaal("Mollengaas", "Mollengaas", m2, "m²"))

    if data.terugkeer_check:
        facts.append(arbeid("Terugkeercontrole", TERUGKEER_CHECK_UREN * site.bereikbaarheid))

    return facts


@scope_calculator("overig", OverigInput, "onderhoud")
def overig(data: OverigInput, site: SiteConditions, ctx: RateContext) -> list[QuantityFact]:
    facts = []
    if data.bladruimen:
        facts.append(arbeid("Bladruimen", OVERIG_BLADRUIMEN_UREN * site.bereikbaarheid))
    if data.terras_reinigen:
        facts.append(arbeid("Terras reinigen", data.terras_oppervlakte * OVERIG_TERRAS_UREN_PER_M2 * site.bereikbaarheid))
    if data.onkruid_bestrating:
        uren = data.bestrating_oppervlakte * OVERIG_ONKRUID_UREN_PER_M2 * site.bereikbaarheid
        facts.append(arbeid("Onkruid tussen bestrating", uren))
    if data.afwatering_controleren:
        uren = data.aantal_afwateringspunten * AFWATERINGSPUNT_UREN * site.bereikbaarheid
        facts.append(arbeid("Afwatering controleren", uren))
    if data.overig_uren > 0:
        facts.append(arbeid(data.overig_notities or "Overige werkzaamheden", data.overig_uren * site.bereikbaarheid))
    return facts
