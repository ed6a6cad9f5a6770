"""Quote document assembler: recompute, versions, manual lines, status."""
import datetime

import pytest

from offerte.calculator import (
    OFFERTES,
    change_status,
    create_offerte,
    duplicate_offerte,
    find_offerte,
    get_offerte,
    list_offertes,
    recompute_quote,
    save_offerte,
    transition,
    update_offerte,
)
from offerte.errors import NotFoundError, StatusTransitionError, UnresolvedFactorError, ValidationError
from offerte.models import AlgemeenParams, Klant, Offerte, OfferteWijziging, Regel


def manual_line(totaal=50.0):
    return Regel(
        id="handmatig-001", scope="bestrating", omschrijving="Extra afvoer puin", eenheid="stuk",
        hoeveelheid=1, prijs_per_eenheid=totaal, totaal=totaal, type="materiaal", herkomst="handmatig",
    )


def test_recompute_builds_regels_and_totalen(quote, ctx):
    result = recompute_quote(quote, ctx)

    assert [r.scope for r in result.regels] == ["grondwerk"] * 3 + ["bestrating"] * 3
    t = result.totalen
    assert t.subtotaal == 864.31
    assert t.materiaalkosten == 166.81
    assert t.arbeidskosten == 697.5
    assert t.totaal_uren == 15.5
    assert t.marge == 129.65  # default margin 15%
    assert t.totaal_incl_btw == round(t.totaal_ex_btw + t.btw, 2)


def test_reconciliation_invariant(quote, ctx):
    t = recompute_quote(quote, ctx).totalen
    assert t.subtotaal == round(sum(r.totaal for r in recompute_quote(quote, ctx).regels), 2)
    assert abs(t.totaal_incl_btw - (t.totaal_ex_btw + t.btw)) < 0.005


def test_recompute_is_idempotent(quote, ctx):
    first = recompute_quote(quote, ctx)
    second = recompute_quote(first, ctx)
    assert first.regels == second.regels
    assert first.totalen == second.totalen


def test_input_quote_is_not_modified(quote, ctx):
    recompute_quote(quote, ctx)
    assert quote.regels == []
    assert quote.totalen.subtotaal == 0.0


def test_quote_margin_overrides_default(quote, ctx):
    quote.marge_percentage = 20
    t = recompute_quote(quote, ctx).totalen
    assert t.marge == 172.86
    assert t.marge_percentage == 20.0


def test_site_conditions_are_applied(quote, ctx):
    quote.algemeen_params = AlgemeenParams(bereikbaarheid="slecht")
    regels = recompute_quote(quote, ctx).regels
    assert regels[0].hoeveelheid == 6.75  # 4.5 h * 1.5


def test_unknown_site_condition_aborts(quote, ctx):
    quote.algemeen_params = AlgemeenParams(bereikbaarheid="matig")
    with pytest.raises(UnresolvedFactorError) as exc:
        recompute_quote(quote, ctx)
    assert exc.value.scope == "algemeen"


def test_invalid_scope_aborts_whole_recompute(quote, ctx):
    quote.scope_data["bestrating"] = {"oppervlakte": -5}
    with pytest.raises(ValidationError) as exc:
        recompute_quote(quote, ctx)
    assert exc.value.scope == "bestrating"
    assert quote.regels == []


def test_zero_input_scope_contributes_nothing(quote, ctx):
    quote.scope_data["bestrating"] = {"oppervlakte": 0}
    result = recompute_quote(quote, ctx)
    assert {r.scope for r in result.regels} == {"grondwerk"}
    assert result.totalen.subtotaal == 356.25


def test_selected_scope_without_data_is_skipped(quote, ctx):
    quote.scopes.append("borders")
    result = recompute_quote(quote, ctx)
    assert "borders" not in {r.scope for r in result.regels}


def test_scope_from_other_quote_type_rejected(quote, ctx):
    quote.scopes.append("heggen")
    quote.scope_data["heggen"] = {"lengte": 10, "hoogte": 2, "breedte": 1}
    with pytest.raises(ValidationError) as exc:
        recompute_quote(quote, ctx)
    assert exc.value.scope == "heggen"


def test_manual_lines_survive_recompute(quote, ctx):
    quote.regels = [manual_line()]
    result = recompute_quote(quote, ctx)
    assert result.regels[-1].herkomst == "handmatig"
    assert result.totalen.subtotaal == 914.31


def test_regenerate_drops_manual_lines(quote, ctx):
    quote.regels = [manual_line()]
    result = recompute_quote(quote, ctx, regenerate=True)
    assert all(r.herkomst == "berekend" for r in result.regels)
    assert result.totalen.subtotaal == 864.31


def test_definitief_is_recomputed_in_place(quote, ctx):
    quote.status = "definitief"
    result = recompute_quote(quote, ctx)
    assert result.status == "definitief"
    assert result.versie == 1


def test_sent_quote_gets_new_version(quote, ctx):
    quote.status = "verzonden"
    result = recompute_quote(quote, ctx)
    assert result.status == "concept"
    assert result.versie == 2
    assert quote.status == "verzonden"
    assert quote.versie == 1


def test_create_offerte_numbers_sequentially(store, ctx):
    klant = Klant(naam="J. Jansen")
    first = create_offerte(store, ctx, klant, scopes=["grondwerk"], scope_data={"grondwerk": {"oppervlakte": 15}})
    second = create_offerte(store, ctx, klant)

    year = datetime.datetime.now(datetime.timezone.utc).year
    assert first.nummer == f"OFF-{year}-0001"
    assert second.nummer == f"OFF-{year}-0002"
    assert first.status == "concept"
    assert first.totalen.arbeidskosten == 202.5
    assert store.get(OFFERTES, first.id)["nummer"] == first.nummer


def test_create_offerte_rejects_wrong_scope(store, ctx):
    with pytest.raises(ValidationError):
        create_offerte(store, ctx, Klant(naam="X"), type="onderhoud", scopes=["grondwerk"])


def test_status_lifecycle(quote):
    definitief = transition(quote, "definitief")
    verzonden = transition(definitief, "verzonden")
    assert transition(verzonden, "geaccepteerd").status == "geaccepteerd"
    assert transition(verzonden, "afgewezen").status == "afgewezen"
    assert transition(definitief, "concept").status == "concept"


@pytest.mark.parametrize("start, target", [
    ("concept", "verzonden"),
    ("concept", "geaccepteerd"),
    ("verzonden", "concept"),
    ("geaccepteerd", "afgewezen"),
])
def test_status_rejects_skips(quote, start, target):
    quote.status = start
    with pytest.raises(StatusTransitionError):
        transition(quote, target)


def test_scope_margin_applies_to_manual_lines(quote, ctx):
    ctx.instellingen.scope_marges["bestrating"] = 40
    quote.scopes = []
    quote.regels = [manual_line()]
    t = recompute_quote(quote, ctx).totalen
    assert t.subtotaal == 50.0
    assert t.marge == 20.0
    assert t.marge_percentage == 40.0


def test_duplicate_scope_is_computed_once(quote, ctx):
    once = recompute_quote(quote, ctx)
    quote.scopes.append("grondwerk")
    twice = recompute_quote(quote, ctx)
    assert twice.totalen == once.totalen
    assert len({r.id for r in twice.regels}) == len(twice.regels)


def test_duplicate_scopes_are_dropped_on_parse():
    quote = Offerte(id="x", owner_id="u", klant=Klant(naam="X"), scopes=["bestrating", "grondwerk", "bestrating"])
    assert quote.scopes == ["bestrating", "grondwerk"]


# ---------------------------------------------------------------------------
# Stored quotes
# ---------------------------------------------------------------------------

def new_grondwerk_quote(store, ctx, oppervlakte=15):
    return create_offerte(
        store, ctx, Klant(naam="J. Jansen"),
        scopes=["grondwerk"], scope_data={"grondwerk": {"oppervlakte": oppervlakte}},
    )


def test_update_replaces_stored_regels_and_totalen(store, ctx):
    created = new_grondwerk_quote(store, ctx)
    updated = update_offerte(store, ctx, created.id, OfferteWijziging(scope_data={"grondwerk": {"oppervlakte": 30}}))

    stored = get_offerte(store, created.id)
    assert stored.scope_data["grondwerk"]["oppervlakte"] == 30
    assert stored.regels == updated.regels
    assert stored.totalen == updated.totalen
    assert stored.totalen.subtotaal > created.totalen.subtotaal
    assert stored.nummer == created.nummer
    assert stored.created_at == created.created_at


def test_recompute_stored_quote_picks_up_new_rates(store, ctx):
    created = new_grondwerk_quote(store, ctx)
    ctx.instellingen.uurtarief = 50.0
    update_offerte(store, ctx, created.id)
    assert get_offerte(store, created.id).totalen.arbeidskosten == 225.0  # 4.5 h * 50


def test_update_keeps_manual_lines_unless_regenerated(store, ctx):
    created = new_grondwerk_quote(store, ctx)
    update_offerte(store, ctx, created.id, OfferteWijziging(regels=[manual_line()]))
    assert get_offerte(store, created.id).regels[-1].herkomst == "handmatig"

    update_offerte(store, ctx, created.id, regenerate=True)
    assert all(r.herkomst == "berekend" for r in get_offerte(store, created.id).regels)


def test_update_of_sent_quote_stores_new_version(store, ctx):
    created = new_grondwerk_quote(store, ctx)
    change_status(store, created.id, "definitief")
    change_status(store, created.id, "verzonden")
    update_offerte(store, ctx, created.id)
    stored = get_offerte(store, created.id)
    assert stored.status == "concept"
    assert stored.versie == 2


def test_save_last_write_wins(store, ctx):
    created = new_grondwerk_quote(store, ctx)
    save_offerte(store, created.model_copy(update={"notities": "eerste"}))
    save_offerte(store, created.model_copy(update={"notities": "tweede"}))
    assert get_offerte(store, created.id).notities == "tweede"


def test_status_change_is_stored(store, ctx):
    created = new_grondwerk_quote(store, ctx)
    change_status(store, created.id, "definitief")
    assert get_offerte(store, created.id).status == "definitief"
    with pytest.raises(StatusTransitionError):
        change_status(store, created.id, "geaccepteerd")
    assert get_offerte(store, created.id).status == "definitief"


def test_lookup_by_nummer_and_owner(store, ctx):
    first = new_grondwerk_quote(store, ctx)
    second = new_grondwerk_quote(store, ctx, 20)
    assert find_offerte(store, first.owner_id, second.nummer).id == second.id
    assert [q.id for q in list_offertes(store, first.owner_id)] == [first.id, second.id]
    assert list_offertes(store, "someone_else") == []


def test_missing_quote(store, ctx):
    with pytest.raises(NotFoundError):
        get_offerte(store, "nope")
    with pytest.raises(NotFoundError):
        update_offerte(store, ctx, "nope")
    with pytest.raises(NotFoundError):
        save_offerte(store, Offerte(id="nope", owner_id="u", klant=Klant(naam="X")))


def test_duplicate_gets_fresh_number_and_keeps_inputs(store, ctx):
    created = new_grondwerk_quote(store, ctx)
    update_offerte(store, ctx, created.id, OfferteWijziging(regels=[manual_line()]))
    change_status(store, created.id, "definitief")

    dup = duplicate_offerte(store, ctx, created.id)
    assert dup.id != created.id
    assert dup.nummer != created.nummer
    assert dup.status == "concept"
    assert dup.versie == 1
    assert dup.scope_data == created.scope_data
    assert dup.regels[-1].herkomst == "handmatig"
    assert get_offerte(store, dup.id).totalen == dup.totalen
    assert get_offerte(store, created.id).status == "definitief"
