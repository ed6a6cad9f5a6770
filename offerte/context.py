# offerte/context.py
# Everything a recompute reads from the rate tables, fetched in one batch.

from __future__ import annotations

from dataclasses import dataclass, field

from .correction import CorrectionFactorResolver
from .errors import ConfigurationError, UnresolvedFactorError
from .models import AlgemeenParams, Instellingen, NormHour, Product
from .repositories import InstellingenRepository, NormHourRepository, ProductCatalog
from .store import RecordStore


@dataclass
class RateContext:
    owner_id: str | None
    instellingen: Instellingen
    factoren: dict[tuple[str, str], float] = field(default_factory=dict)
    normuren: dict[tuple[str, str], NormHour] = field(default_factory=dict)
    producten: dict[str, Product] = field(default_factory=dict)

    def factor(self, type: str, waarde: str) -> float:
        try:
            return self.factoren[(type, waarde)]
        except KeyError:
            raise UnresolvedFactorError(type, waarde) from None

    def norm(self, scope: str, activiteit: str) -> float:
        normuur = self.normuren.get((scope, activiteit))
        if normuur is None:
            raise ConfigurationError(
                f"no norm hour configured for {scope}/{activiteit!r}",
                key=f"{scope}/{activiteit}",
            )
        return normuur.normuur_per_eenheid

    def product(self, productnaam: str) -> Product:
        product = self.producten.get(productnaam)
        if product is None:
            raise ConfigurationError(f"no active product {productnaam!r}", key=productnaam)
        return product

    def machine_tarief(self, sleutel: str) -> float:
        tarief = self.instellingen.machine_tarieven.get(sleutel)
        if tarief is None:
            raise ConfigurationError(f"no machine rate {sleutel!r}", key=sleutel)
        return tarief


def load_rate_context(store: RecordStore, owner_id: str) -> RateContext:
    """One read per table: factor tiers, the owner's norm hours, active products, settings."""
    normuren = NormHourRepository(store).list(owner_id)
    producten = ProductCatalog(store).list_active(owner_id)
    return RateContext(
        owner_id=owner_id,
        instellingen=InstellingenRepository(store).get(owner_id),
        factoren=CorrectionFactorResolver(store).snapshot(owner_id),
        normuren={(n.scope, n.activiteit): n for n in normuren},
        producten={p.productnaam: p for p in producten},
    )


@dataclass(frozen=True)
class SiteConditions:
    """Site-wide multipliers from the quote's algemeen_params."""

    bereikbaarheid: float = 1.0
    achterstalligheid: float = 1.0

    @classmethod
    def resolve(cls, params: AlgemeenParams, ctx: RateContext) -> "SiteConditions":
        achterstalligheid = 1.0
        if params.achterstalligheid is not None:
            achterstalligheid = ctx.factor("achterstalligheid", params.achterstalligheid)
        return cls(
            bereikbaarheid=ctx.factor("bereikbaarheid", params.bereikbaarheid),
            achterstalligheid=achterstalligheid,
        )
