# offerte/scopes.py
# Input shape per scope. Each scope has its own model; nothing is shared
# beyond BaseModel. Raw scope_data entries are parsed into these by the
# calculator registry.

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Intensiteit = Literal["weinig", "gemiddeld", "veel"]


class ScopeInput(BaseModel):
    model_config = ConfigDict(extra="forbid")


# ---------- AANLEG ----------

class GrondwerkInput(ScopeInput):
    oppervlakte: float = Field(ge=0)
    diepte: Literal["licht", "standaard", "zwaar"] = "standaard"
    afvoer_grond: bool = False


class BestratingZone(ScopeInput):
    type: Literal["pad", "oprit", "terrein"]
    oppervlakte: float = Field(ge=0)


class BestratingInput(ScopeInput):
    oppervlakte: float = Field(ge=0)
    type_bestrating: Literal["tegel", "klinker", "natuursteen"] = "tegel"
    snijwerk: Literal["laag", "gemiddeld", "hoog"] = "laag"

    # paving material itself, priced from the catalog when given
    product: str | None = None
    stuks_per_m2: float = Field(default=1.0, ge=0)

    dikte_zandbed_cm: float = Field(default=5, ge=0)
    opsluitbanden: bool = False

    # foundation build-up by use; zones add their own layers
    fundering: Literal["pad", "oprit", "terrein"] | None = None
    zones: list[BestratingZone] = []


class BordersInput(ScopeInput):
    oppervlakte: float = Field(ge=0)
    beplantingsintensiteit: Intensiteit = "gemiddeld"
    afwerking: Literal["geen", "schors", "grind"] = "geen"
    bodemverbetering: bool = False


class GrasInput(ScopeInput):
    oppervlakte: float = Field(ge=0)
    type: Literal["zaaien", "graszoden"] = "graszoden"
    kunstgras: bool = False
    drainage_meters: float = Field(default=0, ge=0)
    opsluitbanden_meters: float = Field(default=0, ge=0)


class HoutwerkInput(ScopeInput):
    type_houtwerk: Literal["schutting", "vlonder", "pergola"] = "schutting"

    # meters for schutting, m² for vlonder, count for pergola
    afmeting: float = Field(ge=0)
    fundering: Literal["standaard", "zwaar"] = "standaard"


class WaterElektraInput(ScopeInput):
    verlichting: Literal["geen", "basis", "uitgebreid"] = "basis"
    aantal_punten: int = Field(default=0, ge=0)
    sleuven_nodig: bool = True


class SpecialItem(ScopeInput):
    type: Literal["jacuzzi", "sauna", "prefab", "overig"]
    omschrijving: str | None = None
    aantal: int = Field(default=1, ge=0)


class SpecialsInput(ScopeInput):
    items: list[SpecialItem] = []


# ---------- ONDERHOUD ----------

class GrasOnderhoudInput(ScopeInput):
    oppervlakte: float = Field(ge=0)
    maaien: bool = True
    kanten_steken: bool = False
    verticuteren: bool = False


class BordersOnderhoudInput(ScopeInput):
    oppervlakte: float = Field(ge=0)
    onderhoudsintensiteit: Intensiteit = "gemiddeld"
    onkruid_verwijderen: bool = True
    snoei: Literal["geen", "licht", "zwaar"] = "geen"
    bodem: Literal["open", "bedekt"] = "open"
    afvoer_groenafval: bool = False


class HeggenInput(ScopeInput):
    lengte: float = Field(ge=0)
    hoogte: float = Field(ge=0)
    breedte: float = Field(ge=0)
    snoei: Literal["zijkanten", "bovenkant", "beide"] = "beide"
    afvoer_snoeisel: bool = False
    haagsoort: Literal["liguster", "beuk", "taxus", "conifeer", "buxus"] | None = None
    hoogwerker_nodig: bool = False
    snoeifrequentie: int = Field(default=1, ge=1, le=3)
    ondergrond: Literal["bestrating", "gras", "grind", "border"] | None = None


class BomenInput(ScopeInput):
    aantal_bomen: int = Field(ge=0)
    snoei: Literal["licht", "zwaar"] = "licht"
    hoogteklasse: Literal["laag", "middel", "hoog", "zeer_hoog"] = "laag"
    afvoer: bool = False
    kroondiameter: float = Field(default=3, ge=0)
    inspectie: Literal["geen", "visueel", "gecertificeerd"] = "geen"
    nabij_straat: bool = False
    nabij_gebouw: bool = False
    nabij_kabels: bool = False


class ReinigingInput(ScopeInput):
    terras_reinigen: bool = False
    terras_oppervlakte: float = Field(default=0, ge=0)
    terras_type: Literal["keramisch", "beton", "klinkers", "natuursteen", "hout"] | None = None

    bladruimen: bool = False
    bladruimen_oppervlakte: float = Field(default=0, ge=0)
    bladruimen_type: Literal["eenmalig", "seizoen"] = "eenmalig"

    onkruid_bestrating: bool = False
    onkruid_oppervlakte: float = Field(default=0, ge=0)
    onkruid_methode: Literal["handmatig", "branden", "heet_water", "chemisch"] = "handmatig"

    algereiniging: bool = False
    alge_oppervlakte: float = Field(default=0, ge=0)


class BemestingInput(ScopeInput):
    oppervlakte: float = Field(ge=0)
    bemestingstype: Literal["basis", "premium", "bio"] = "basis"
    frequentie: int = Field(default=1, ge=1, le=3)
    kalkbehandeling: bool = False
    grondanalyse: bool = False


class GazonanalyseInput(ScopeInput):
    oppervlakte: float = Field(ge=0)
    herstelacties: list[Literal["verticuteren", "doorzaaien", "nieuwe_grasmat", "plaggen", "bijzaaien"]] = []

    # bare patches; estimated as 10% of the lawn when not measured
    kale_plekken_m2: float | None = Field(default=None, ge=0)
    bekalken: bool = False


class MollenbestrijdingInput(ScopeInput):
    pakket: Literal["basis", "premium", "premium_plus"] = "basis"
    gazonherstel_m2: float = Field(default=0, ge=0)
    preventief_gaas_m2: float = Field(default=0, ge=0)
    terugkeer_check: bool = False


class OverigInput(ScopeInput):
    bladruimen: bool = False
    terras_reinigen: bool = False
    terras_oppervlakte: float = Field(default=0, ge=0)
    onkruid_bestrating: bool = False
    bestrating_oppervlakte: float = Field(default=0, ge=0)
    afwatering_controleren: bool = False
    aantal_afwateringspunten: int = Field(default=0, ge=0)
    overig_uren: float = Field(default=0, ge=0)
    overig_notities: str | None = None
