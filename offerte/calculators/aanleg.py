# offerte/calculators/aanleg.py
# Construction scopes. The module-level tables are physical coefficients
# (volumes, spacing, counts); business multipliers always come from the
# correction factors in the rate context.

from __future__ import annotations

import math

from ..context import RateContext, SiteConditions
from ..models import QuantityFact
from ..scopes import (
    BestratingInput,
    BordersInput,
    GrasInput,
    GrondwerkInput,
    HoutwerkInput,
    SpecialsInput,
    WaterElektraInput,
)
from .base import arbeid, machine, materiaal, scope_calculator

# excavated volume per m² by depth class
DIEPTE_VOLUME_M3_PER_M2 = {
    "licht": 0.15,
    "standaard": 0.25,
    "zwaar": 0.40,
}

# a mini-digger is priced in above this area
MINIGRAVER_DREMPEL_M2 = 20
MINIGRAVER_UREN_PER_M2 = 0.05

LEG_ACTIVITEIT = {
    "tegel": "Tegels leggen",
    "klinker": "Klinkers leggen",
    "natuursteen": "Natuursteen leggen",
}

# foundation layers in cm per paving use
FUNDERING_LAGEN_CM = {
    "pad": {"Puingranulaat 0-31,5": 10, "Straatzand": 5},
    "oprit": {"Puingranulaat 0-31,5": 20, "Brekerszand": 5},
    "terrein": {"Puingranulaat 0-31,5": 35, "Brekerszand": 5, "Stabiliser (cement)": 5},
}

OPSLUITBAND = "Opsluitband 100x20x6"

PLANT_ACTIVITEIT = {
    "weinig": "Planten laag",
    "gemiddeld": "Planten gemiddeld",
    "veel": "Planten hoog",
}
PLANTEN_PER_M2 = {"weinig": 3, "gemiddeld": 6, "veel": 10}

AFWERKING_PRODUCT = {
    "schors": "Boomschors 10-40mm",
    "grind": "Siersplit wit 8-16mm",
}
AFDEKLAAG_M3_PER_M2 = 0.05
BODEMVERBETERING_DIEPTE_M = 0.3

GRASZAAD_KG_PER_M2 = 0.035

SCHUTTINGPLANKEN_PER_METER = 6
PAAL_AFSTAND_METERS = 2
VLONDERPLANKEN_M_PER_M2 = 7
VLONDER_EXTRA_FUNDERING_PUNTEN = 4
PERGOLA_FUNDERING_PUNTEN = 4

SLEUF_LENGTE_PER_LICHTPUNT = 5

INSTALLATIE_UREN = {
    "jacuzzi": 8,
    "sauna": 6,
    "prefab": 4,
    "overig": 4,
}


def _omtrek(oppervlakte: float) -> float:
    """Perimeter estimate for a square of this area."""
    return 4 * math.sqrt(oppervlakte)


@scope_calculator("grondwerk", GrondwerkInput, "aanleg")
def grondwerk(data: GrondwerkInput, site: SiteConditions, ctx: RateContext) -> list[QuantityFact]:
    diepte_factor = ctx.factor("diepte", data.diepte)
    if data.oppervlakte == 0:
        return []

    uren = data.oppervlakte * ctx.norm("grondwerk", "Ontgraven") * diepte_factor * site.bereikbaarheid
    facts = [arbeid(f"Ontgraven ({data.diepte})", uren)]

    if data.oppervlakte > MINIGRAVER_DREMPEL_M2:
        machine_uren = data.oppervlakte * MINIGRAVER_UREN_PER_M2 * diepte_factor
        facts.append(machine("minigraver", "Machine-uren minigraver", machine_uren))

    if data.afvoer_grond:
        volume = data.oppervlakte * DIEPTE_VOLUME_M3_PER_M2[data.diepte]
        laden = volume * ctx.norm("grondwerk", "Grond afvoeren") * site.bereikbaarheid
        facts.append(arbeid("Grond laden voor afvoer", laden))
        facts.append(materiaal("Afvoer grond (stort)", "Afvoerkosten grond", volume, "m³"))

    return facts


def _funderingslagen(oppervlakte: float, gebruik: str, prefix: str = "") -> list[QuantityFact]:
    return [
        materiaal(productnaam, f"{prefix}{productnaam} ({cm} cm)", oppervlakte * cm / 100, "m³")
        for productnaam, cm in FUNDERING_LAGEN_CM[gebruik].items()
    ]


@scope_calculator("bestrating", BestratingInput, "aanleg")
def bestrating(data: BestratingInput, site: SiteConditions, ctx: RateContext) -> list[QuantityFact]:
    snijwerk_factor = ctx.factor("snijwerk", data.snijwerk)
    if data.oppervlakte == 0 and not data.zones:
        return []

    facts: list[QuantityFact] = []
    opp = data.oppervlakte

    if opp > 0:
        activiteit = LEG_ACTIVITEIT[data.type_bestrating]
        uren = opp * ctx.norm("bestrating", activiteit) * site.bereikbaarheid * snijwerk_factor
        facts.append(arbeid(f"{activiteit} (snijwerk: {data.snijwerk})", uren))

        if data.product:
            facts.append(materiaal(data.product, data.product, opp * data.stuks_per_m2, ctx.product(data.product).eenheid))

        zandbed = opp * ctx.norm("bestrating", "Zandbed aanbrengen") * site.bereikbaarheid
        facts.append(arbeid("Zandbed aanbrengen", zandbed))
        facts.append(
            materiaal("Straatzand", f"Zandbed {data.dikte_zandbed_cm:g} cm", opp * data.dikte_zandbed_cm / 100, "m³")
        )

        if data.opsluitbanden:
            omtrek = _omtrek(opp)
            uren = omtrek * ctx.norm("bestrating", "Opsluitbanden plaatsen") * site.bereikbaarheid
            facts.append(arbeid("Opsluitbanden plaatsen", uren))
            facts.append(materiaal(OPSLUITBAND, "Opsluitbanden", omtrek, "stuk"))

        if data.fundering:
            facts.extend(_funderingslagen(opp, data.fundering))

    for zone in data.zones:
        facts.extend(_funderingslagen(zone.oppervlakte, zone.type, prefix=f"Zone {zone.type}: "))

    return facts


@scope_calculator("borders", BordersInput, "aanleg")
def borders(data: BordersInput, site: SiteConditions, ctx: RateContext) -> list[QuantityFact]:
    opp = data.oppervlakte
    if opp == 0:
        return []

    intensiteit = data.beplantingsintensiteit
    facts = [
        arbeid("Grondbewerking border", opp * ctx.norm("borders", "Grondbewerking border") * site.bereikbaarheid),
        arbeid(
            f"Beplanten ({intensiteit} intensiteit)",
            opp * ctx.norm("borders", PLANT_ACTIVITEIT[intensiteit]) * site.bereikbaarheid,
        ),
        materiaal("Bodembedekker (pot 9cm)", "Bodembedekker (pot 9cm)", opp * PLANTEN_PER_M2[intensiteit], "stuk"),
    ]

    if data.afwerking != "geen":
        productnaam = AFWERKING_PRODUCT[data.afwerking]
        facts.append(arbeid(f"Afwerking {data.afwerking} aanbrengen", opp * ctx.norm("borders", "Schors aanbrengen") * site.bereikbaarheid))
        facts.append(materiaal(productnaam, productnaam, opp * AFDEKLAAG_M3_PER_M2, "m³"))

    if data.bodemverbetering:
        facts.append(materiaal("Tuinaarde", "Bodemverbetering (tuinaarde)", opp * BODEMVERBETERING_DIEPTE_M, "m³"))

    return facts


@scope_calculator("gras", GrasInput, "aanleg")
def gras(data: GrasInput, site: SiteConditions, ctx: RateContext) -> list[QuantityFact]:
    opp = data.oppervlakte
    facts: list[QuantityFact] = []

    if opp > 0:
        facts.append(arbeid("Ondergrond bewerken", opp * ctx.norm("gras", "Ondergrond bewerken") * site.bereikbaarheid))

        if data.kunstgras:
            facts.append(arbeid("Kunstgras leggen", opp * ctx.norm("gras", "Kunstgras leggen") * site.bereikbaarheid))
            facts.append(materiaal("Kunstgras", "Kunstgras", opp, "m²"))
        elif data.type == "graszoden":
            facts.append(arbeid("Graszoden leggen", opp * ctx.norm("gras", "Graszoden leggen") * site.bereikbaarheid))
            facts.append(materiaal("Graszoden", "Graszoden", opp, "m²"))
        else:
            facts.append(arbeid("Gras zaaien", opp * ctx.norm("gras", "Gras zaaien") * site.bereikbaarheid))
            facts.append(materiaal("Graszaad siergazon", "Graszaad", opp * GRASZAAD_KG_PER_M2, "kg"))

    if data.drainage_meters > 0:
        facts.append(materiaal("PVC drainagebuis", "PVC drainagebuis", data.drainage_meters, "m"))
        facts.append(materiaal("Kokos omhulsel", "Kokos omhulsel", data.drainage_meters, "m"))

    if data.opsluitbanden_meters > 0:
        facts.append(materiaal(OPSLUITBAND, "Opsluitbanden", data.opsluitbanden_meters, "stuk"))

    return facts


@scope_calculator("houtwerk", HoutwerkInput, "aanleg")
def houtwerk(data: HoutwerkInput, site: SiteConditions, ctx: RateContext) -> list[QuantityFact]:
    afmeting = data.afmeting
    if afmeting == 0:
        return []

    facts: list[QuantityFact] = []

    if data.type_houtwerk == "schutting":
        palen = math.ceil(afmeting / PAAL_AFSTAND_METERS) + 1
        facts.append(arbeid("Schutting plaatsen", afmeting * ctx.norm("houtwerk", "Schutting plaatsen") * site.bereikbaarheid))
        facts.append(
            materiaal("Schuttingplank 180x15cm", "Schuttingplank 180x15cm", afmeting * SCHUTTINGPLANKEN_PER_METER, "stuk")
        )
        facts.append(materiaal("Schuttingpaal 7x7x270cm", "Schuttingpaal 7x7x270cm", palen, "stuk"))
        funderingspunten = palen
    elif data.type_houtwerk == "vlonder":
        facts.append(arbeid("Vlonder leggen", afmeting * ctx.norm("houtwerk", "Vlonder leggen") * site.bereikbaarheid))
        facts.append(
            materiaal(
                "Vlonderdeel hardhout 21x145mm",
                "Vlonderdeel hardhout 21x145mm",
                afmeting * VLONDERPLANKEN_M_PER_M2,
                "m",
            )
        )
        funderingspunten = math.ceil(afmeting / PAAL_AFSTAND_METERS) + VLONDER_EXTRA_FUNDERING_PUNTEN
    else:
        facts.append(arbeid("Pergola bouwen", afmeting * ctx.norm("houtwerk", "Pergola bouwen") * site.bereikbaarheid))
        funderingspunten = math.ceil(afmeting) * PERGOLA_FUNDERING_PUNTEN

    norm = ctx.norm("houtwerk", f"Fundering {data.fundering}")
    facts.append(arbeid(f"Fundering plaatsen ({data.fundering})", funderingspunten * norm * site.bereikbaarheid))
    facts.append(materiaal("Betonpoer 30x30x30cm", "Betonpoer 30x30x30cm", funderingspunten, "stuk"))
    return facts


@scope_calculator("water_elektra", WaterElektraInput, "aanleg")
def water_elektra(data: WaterElektraInput, site: SiteConditions, ctx: RateContext) -> list[QuantityFact]:
    punten = data.aantal_punten
    if data.verlichting == "geen" or punten == 0:
        return []

    facts: list[QuantityFact] = []

    if data.sleuven_nodig:
        sleuf = punten * SLEUF_LENGTE_PER_LICHTPUNT
        for activiteit in ("Sleuf graven", "Kabel leggen", "Sleuf herstellen"):
            facts.append(arbeid(activiteit, sleuf * ctx.norm("water_elektra", activiteit) * site.bereikbaarheid))
        facts.append(materiaal("Kabel 3x1,5 grond", "Kabel 3x1,5 grond", sleuf, "m"))

    facts.append(arbeid("Armaturen plaatsen", punten * ctx.norm("water_elektra", "Armatuur plaatsen") * site.bereikbaarheid))
    facts.append(materiaal("Grondspot LED", "Grondspot LED", punten, "stuk"))
    facts.append(materiaal("Lasdoos waterdicht", "Lasdoos waterdicht", punten, "stuk"))
    return facts


@scope_calculator("specials", SpecialsInput, "aanleg")
def specials(data: SpecialsInput, site: SiteConditions, ctx: RateContext) -> list[QuantityFact]:
    facts = []
    for item in data.items:
        omschrijving = item.omschrijving or f"{item.type.capitalize()} plaatsen"
        if item.aantal > 1:
            omschrijving = f"{omschrijving} ({item.aantal}x)"
        uren = INSTALLATIE_UREN[item.type] * item.aantal * site.bereikbaarheid
        facts.append(arbeid(omschrijving, uren))
    return facts
