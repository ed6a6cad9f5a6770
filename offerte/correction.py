# offerte/correction.py
# Two-tier correction factors: system defaults (owner_id unset) overridden
# per user. This module is the only place where the two tiers meet; callers
# receive either a multiplier or a tagged SystemDefault/UserOverride.

from __future__ import annotations

import logging

from .errors import UnresolvedFactorError
from .models import CorrectionFactor, SeedResult, SystemDefault, UserOverride
from .seeds import load_correction_seeds
from .store import RecordStore

logger = logging.getLogger(__name__)

TABLE = "correctiefactoren"


def _as_factor(record: dict) -> CorrectionFactor:
    if record.get("owner_id") is None:
        return SystemDefault(
            id=record["id"], type=record["type"], waarde=record["waarde"], factor=record["factor"]
        )
    return UserOverride(
        id=record["id"],
        owner_id=record["owner_id"],
        type=record["type"],
        waarde=record["waarde"],
        factor=record["factor"],
    )


class CorrectionFactorResolver:
    def __init__(self, store: RecordStore):
        self.store = store

    # ---------- LOOKUP ----------

    def _system(self, **match) -> list[dict]:
        return self.store.query(TABLE, owner_id=None, **match)

    def _user(self, owner_id: str, **match) -> list[dict]:
        return self.store.query(TABLE, owner_id=owner_id, **match)

    def lookup(self, type: str, waarde: str, owner_id: str | None = None) -> CorrectionFactor | None:
        """The record that decides the multiplier, user tier first."""
        if owner_id is not None:
            override = self.store.unique(TABLE, owner_id=owner_id, type=type, waarde=waarde)
            if override is not None:
                return _as_factor(override)
        default = self.store.unique(TABLE, owner_id=None, type=type, waarde=waarde)
        return _as_factor(default) if default is not None else None

    def resolve(self, type: str, waarde: str, owner_id: str | None = None) -> float:
        """
        Effective multiplier for (type, waarde).
        There is no implicit 1.0: an unknown value is a typo until proven otherwise.
        """
        factor = self.lookup(type, waarde, owner_id)
        if factor is None:
            raise UnresolvedFactorError(type, waarde)
        return factor.factor

    def resolve_all(self, type: str, owner_id: str | None = None) -> dict[str, float]:
        """All values of one type; user records replace defaults with the same value."""
        merged = {r["waarde"]: r["factor"] for r in self._system(type=type)}
        if owner_id is not None:
            merged.update({r["waarde"]: r["factor"] for r in self._user(owner_id, type=type)})
        return merged

    def snapshot(self, owner_id: str | None = None) -> dict[tuple[str, str], float]:
        """resolve_all over every type in two reads, for one recompute."""
        merged = {(r["type"], r["waarde"]): r["factor"] for r in self._system()}
        if owner_id is not None:
            merged.update({(r["type"], r["waarde"]): r["factor"] for r in self._user(owner_id)})
        return merged

    def list_factors(self, owner_id: str | None = None) -> list[CorrectionFactor]:
        """Every system default, with the user's override substituted in place."""
        defaults = self._system()
        if owner_id is None:
            return [_as_factor(r) for r in defaults]

        overrides = {(r["type"], r["waarde"]): r for r in self._user(owner_id)}
        return [_as_factor(overrides.get((r["type"], r["waarde"]), r)) for r in defaults]

    # ---------- WRITES ----------

    def upsert(self, owner_id: str, type: str, waarde: str, factor: float) -> str:
        """Create or update exactly one user override; returns its id."""
        with self.store.key_lock(TABLE, owner_id, type, waarde):
            existing = self.store.unique(TABLE, owner_id=owner_id, type=type, waarde=waarde)
            if existing is not None:
                self.store.patch(TABLE, existing["id"], factor=float(factor))
                logger.info(
                    "correction override updated: %s %s=%s -> %s", owner_id, type, waarde, factor, extra={"owner_id": owner_id}
                )
                return existing["id"]

            record_id = self.store.insert(
                TABLE,
                {"owner_id": owner_id, "type": type, "waarde": waarde, "factor": float(factor)},
            )
            logger.info(
                "correction override created: %s %s=%s -> %s", owner_id, type, waarde, factor, extra={"owner_id": owner_id}
            )
            return record_id

    def reset_to_default(self, owner_id: str, type: str, waarde: str) -> bool:
        """Drop the user override. Returns False when there was none."""
        with self.store.key_lock(TABLE, owner_id, type, waarde):
            existing = self.store.unique(TABLE, owner_id=owner_id, type=type, waarde=waarde)
            if existing is None:
                return False
            self.store.delete(TABLE, existing["id"])
        logger.info("correction override reset: %s %s=%s", owner_id, type, waarde, extra={"owner_id": owner_id})
        return True

    def initialize_system_defaults(self) -> SeedResult:
        with self.store.key_lock(TABLE, "system-defaults"):
            if self.store.first(TABLE, owner_id=None) is not None:
                return SeedResult(message="System defaults already exist", count=0)

            seeds = load_correction_seeds()
            for seed in seeds:
                self.store.insert(TABLE, {"owner_id": None, **seed})

        logger.info("seeded %d system correction factors", len(seeds))
        return SeedResult(message="System defaults initialized", count=len(seeds))
