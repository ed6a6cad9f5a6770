# offerte/repositories.py
# Norm hours, product catalog and per-user settings on top of the record store.

from __future__ import annotations

import logging

from .models import Instellingen, NormHour, Product, utcnow
from .seeds import load_normuren_seeds, load_product_seeds
from .store import RecordStore

logger = logging.getLogger(__name__)


class NormHourRepository:
    TABLE = "normuren"

    def __init__(self, store: RecordStore):
        self.store = store

    def list(self, owner_id: str) -> list[NormHour]:
        return [NormHour(**r) for r in self.store.query(self.TABLE, owner_id=owner_id)]

    def list_by_scope(self, owner_id: str, scope: str) -> list[NormHour]:
        return [NormHour(**r) for r in self.store.query(self.TABLE, owner_id=owner_id, scope=scope)]

    def get(self, owner_id: str, scope: str, activiteit: str) -> NormHour | None:
        record = self.store.unique(self.TABLE, owner_id=owner_id, scope=scope, activiteit=activiteit)
        return NormHour(**record) if record is not None else None

    def create(
        self,
        owner_id: str,
        activiteit: str,
        scope: str,
        normuur_per_eenheid: float,
        eenheid: str,
        omschrijving: str | None = None,
    ) -> NormHour:
        record = {
            "owner_id": owner_id,
            "activiteit": activiteit,
            "scope": scope,
            "normuur_per_eenheid": normuur_per_eenheid,
            "eenheid": eenheid,
            "omschrijving": omschrijving,
        }
        NormHour(id="new", **record)  # validate before writing
        record_id = self.store.insert(self.TABLE, record)
        return NormHour(id=record_id, **record)

    def seed_defaults(self, owner_id: str) -> int:
        """Default norm hours for a new user; no-op once the user has any."""
        with self.store.key_lock(self.TABLE, owner_id):
            if self.store.first(self.TABLE, owner_id=owner_id) is not None:
                return 0
            seeds = load_normuren_seeds()
            for seed in seeds:
                self.store.insert(self.TABLE, {"owner_id": owner_id, **seed})
        logger.info("seeded %d norm hours for %s", len(seeds), owner_id, extra={"owner_id": owner_id})
        return len(seeds)


class ProductCatalog:
    TABLE = "producten"

    def __init__(self, store: RecordStore):
        self.store = store

    def list(self, owner_id: str) -> list[Product]:
        return [Product(**r) for r in self.store.query(self.TABLE, owner_id=owner_id)]

    def list_active(self, owner_id: str) -> list[Product]:
        return [Product(**r) for r in self.store.query(self.TABLE, owner_id=owner_id, is_actief=True)]

    def get_by_name(self, owner_id: str, productnaam: str) -> Product | None:
        record = self.store.first(self.TABLE, owner_id=owner_id, productnaam=productnaam)
        return Product(**record) if record is not None else None

    def create(self, owner_id: str, **fields) -> Product:
        now = utcnow()
        product = Product(id="new", owner_id=owner_id, created_at=now, updated_at=now, **fields)
        record = product.model_dump(exclude={"id", "prijs_per_eenheid"})
        return product.model_copy(update={"id": self.store.insert(self.TABLE, record)})

    def set_active(self, product_id: str, is_actief: bool) -> None:
        self.store.patch(self.TABLE, product_id, is_actief=is_actief, updated_at=utcnow())

    def seed_defaults(self, owner_id: str) -> int:
        with self.store.key_lock(self.TABLE, owner_id):
            if self.store.first(self.TABLE, owner_id=owner_id) is not None:
                return 0
            seeds = load_product_seeds()
            for seed in seeds:
                self.create(owner_id, **seed)
        logger.info("seeded %d products for %s", len(seeds), owner_id, extra={"owner_id": owner_id})
        return len(seeds)


class InstellingenRepository:
    TABLE = "instellingen"

    def __init__(self, store: RecordStore):
        self.store = store

    def get(self, owner_id: str) -> Instellingen:
        record = self.store.unique(self.TABLE, owner_id=owner_id)
        if record is None:
            return Instellingen()
        return Instellingen(**{k: v for k, v in record.items() if k not in ("id", "owner_id")})

    def save(self, owner_id: str, instellingen: Instellingen) -> None:
        with self.store.key_lock(self.TABLE, owner_id):
            existing = self.store.unique(self.TABLE, owner_id=owner_id)
            if existing is None:
                self.store.insert(self.TABLE, {"owner_id": owner_id, **instellingen.model_dump()})
            else:
                self.store.patch(self.TABLE, existing["id"], **instellingen.model_dump())
