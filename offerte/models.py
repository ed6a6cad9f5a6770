from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

RegelType = Literal["materiaal", "arbeid", "machine"]
Herkomst = Literal["berekend", "handmatig"]
OfferteType = Literal["aanleg", "onderhoud"]
OfferteStatus = Literal["concept", "definitief", "verzonden", "geaccepteerd", "afgewezen"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------- RATE TABLES ----------

class SystemDefault(BaseModel):
    tier: Literal["system"] = "system"
    id: str
    type: str
    waarde: str
    factor: float


class UserOverride(BaseModel):
    tier: Literal["user"] = "user"
    id: str
    owner_id: str
    type: str
    waarde: str
    factor: float


CorrectionFactor = Annotated[Union[SystemDefault, UserOverride], Field(discriminator="tier")]


class SeedResult(BaseModel):
    message: str
    count: int


class NormHour(BaseModel):
    id: str
    owner_id: str
    activiteit: str
    scope: str
    normuur_per_eenheid: float = Field(ge=0)
    eenheid: str
    omschrijving: str | None = None


class Product(BaseModel):
    id: str
    owner_id: str
    productnaam: str
    categorie: str
    inkoopprijs: float = Field(ge=0)
    verkoopprijs: float = Field(ge=0)
    eenheid: str

    # fraction lost on site: 0.05 means 5% of what is bought is unusable
    verliespercentage: float = Field(default=0, ge=0, lt=1)

    leverancier: str | None = None
    is_actief: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @computed_field
    @property
    def prijs_per_eenheid(self) -> float:
        """Sale price per usable unit."""
        return self.verkoopprijs / (1 - self.verliespercentage)


class Instellingen(BaseModel):
    uurtarief: float = Field(default=45.0, ge=0)
    standaard_marge_percentage: float = Field(default=15.0, ge=0)
    btw_percentage: float = Field(default=21.0, ge=0)

    machine_tarieven: dict[str, float] = Field(
        default_factory=lambda: {
            "minigraver": 75.0,
            "hoogwerker": 185.0,
            "onkruidbrander": 45.0,
            "heetwaterapparaat": 65.0,
            "verticuteermachine": 80.0,
        }
    )
    scope_marges: dict[str, float] = Field(default_factory=dict)

    # which cost bucket machine lines land in, and whether their hours are billable
    machine_post: Literal["arbeid", "materiaal"] = "arbeid"
    machine_uren_factureerbaar: bool = False

    offerte_nummer_prefix: str = "OFF"


# ---------- CALCULATION OUTPUT ----------

class QuantityFact(BaseModel):
    type: RegelType
    omschrijving: str
    eenheid: str
    hoeveelheid: float = Field(ge=0)

    # product name for materiaal, machine rate key for machine
    sleutel: str | None = None
    marge_percentage: float | None = None


class Regel(BaseModel):
    id: str
    scope: str
    omschrijving: str
    eenheid: str
    hoeveelheid: float
    prijs_per_eenheid: float
    totaal: float
    type: RegelType
    marge_percentage: float | None = None
    herkomst: Herkomst = "berekend"


class Totalen(BaseModel):
    materiaalkosten: float = 0.0
    arbeidskosten: float = 0.0
    totaal_uren: float = 0.0
    subtotaal: float = 0.0
    marge: float = 0.0
    marge_percentage: float = 0.0
    totaal_ex_btw: float = 0.0
    btw: float = 0.0
    totaal_incl_btw: float = 0.0


# ---------- QUOTE ----------

class Klant(BaseModel):
    naam: str
    adres: str = ""
    postcode: str = ""
    plaats: str = ""
    email: str | None = None
    telefoon: str | None = None


class AlgemeenParams(BaseModel):
    # condition values, resolved against the correction factors at recompute
    bereikbaarheid: str = "goed"
    achterstalligheid: str | None = None


class Offerte(BaseModel):
    id: str
    owner_id: str
    nummer: str = ""
    type: OfferteType = "aanleg"
    status: OfferteStatus = "concept"
    versie: int = Field(default=1, ge=1)

    klant: Klant
    algemeen_params: AlgemeenParams = Field(default_factory=AlgemeenParams)

    # scope ids in selection order; scope_data holds the raw input per scope
    scopes: list[str] = []
    scope_data: dict[str, dict[str, Any]] = {}

    regels: list[Regel] = []
    totalen: Totalen = Field(default_factory=Totalen)

    # overrides Instellingen.standaard_marge_percentage when set
    marge_percentage: float | None = Field(default=None, ge=0)

    notities: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("scopes")
    @classmethod
    def unique_scopes(cls, v):
        """A scope selected twice is computed once, at its first position."""
        return list(dict.fromkeys(v))


class OfferteWijziging(BaseModel):
    """Editable inputs of a stored quote. Fields left unset keep their stored value."""

    model_config = ConfigDict(extra="forbid")

    klant: Klant | None = None
    algemeen_params: AlgemeenParams | None = None
    scopes: list[str] | None = None
    scope_data: dict[str, dict[str, Any]] | None = None
    marge_percentage: float | None = Field(default=None, ge=0)
    notities: str | None = None

    # only the manual lines survive the recompute that follows
    regels: list[Regel] | None = None
