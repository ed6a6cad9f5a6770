"""
Scope calculators: quantities, rounding at the boundary, input rejection.
Norm hours and factors come from the default seed sets.
"""
import pytest

from offerte.calculators import CALCULATORS, compute_scope
from offerte.context import SiteConditions, load_rate_context
from offerte.errors import ConfigurationError, UnresolvedFactorError, ValidationError


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

def test_every_scope_is_registered():
    aanleg = {s for s, c in CALCULATORS.items() if c.categorie == "aanleg"}
    onderhoud = {s for s, c in CALCULATORS.items() if c.categorie == "onderhoud"}
    assert aanleg == {"grondwerk", "bestrating", "borders", "gras", "houtwerk", "water_elektra", "specials"}
    assert onderhoud == {
        "gras_onderhoud", "borders_onderhoud", "heggen", "bomen",
        "reiniging", "bemesting", "gazonanalyse", "mollenbestrijding", "overig",
    }


def test_unknown_scope(site, ctx):
    with pytest.raises(ValidationError) as exc:
        compute_scope("zwembad", {}, site, ctx)
    assert exc.value.scope == "zwembad"


# ---------------------------------------------------------------------------
# Grondwerk
# ---------------------------------------------------------------------------

class TestGrondwerk:

    def test_excavation_scenario(self, site, ctx):
        facts = compute_scope(
            "grondwerk", {"oppervlakte": 15, "diepte": "standaard", "afvoer_grond": True}, site, ctx
        )
        assert [f.type for f in facts] == ["arbeid", "arbeid", "materiaal"]

        ontgraven, laden, afvoer = facts
        assert ontgraven.hoeveelheid == 4.5
        assert ontgraven.eenheid == "uur"
        assert laden.hoeveelheid == 0.5  # 3.75 m³ * 0.1 h = 0.375 -> quarter up
        assert afvoer.hoeveelheid == 3.75
        assert afvoer.eenheid == "m³"
        assert afvoer.sleutel == "Afvoer grond (stort)"

    def test_no_haul_away(self, site, ctx):
        facts = compute_scope("grondwerk", {"oppervlakte": 15}, site, ctx)
        assert len(facts) == 1

    def test_minigraver_above_threshold(self, site, ctx):
        facts = compute_scope("grondwerk", {"oppervlakte": 30, "diepte": "standaard"}, site, ctx)
        machine = [f for f in facts if f.type == "machine"]
        assert len(machine) == 1
        assert machine[0].sleutel == "minigraver"
        assert machine[0].hoeveelheid == 2.25

    def test_accessibility_scales_hours(self, ctx):
        facts = compute_scope("grondwerk", {"oppervlakte": 15}, SiteConditions(bereikbaarheid=1.5), ctx)
        assert facts[0].hoeveelheid == 6.75

    def test_user_override_changes_depth_factor(self, store, resolver):
        resolver.upsert("user_1", "diepte", "standaard", 2.0)
        ctx = load_rate_context(store, "user_1")
        facts = compute_scope("grondwerk", {"oppervlakte": 15}, SiteConditions(), ctx)
        assert facts[0].hoeveelheid == 6.0

    def test_zero_area_is_empty(self, site, ctx):
        assert compute_scope("grondwerk", {"oppervlakte": 0, "afvoer_grond": True}, site, ctx) == []

    def test_negative_area_rejected(self, site, ctx):
        with pytest.raises(ValidationError) as exc:
            compute_scope("grondwerk", {"oppervlakte": -1}, site, ctx)
        assert exc.value.scope == "grondwerk"
        assert exc.value.field == "oppervlakte"

    def test_unknown_depth_rejected(self, site, ctx):
        with pytest.raises(ValidationError) as exc:
            compute_scope("grondwerk", {"oppervlakte": 10, "diepte": "heel diep"}, site, ctx)
        assert exc.value.field == "diepte"

    def test_unknown_field_rejected(self, site, ctx):
        with pytest.raises(ValidationError):
            compute_scope("grondwerk", {"oppervlakte": 10, "diepe": "zwaar"}, site, ctx)

    def test_unresolved_factor_names_scope(self, site, ctx):
        del ctx.factoren[("diepte", "standaard")]
        with pytest.raises(UnresolvedFactorError) as exc:
            compute_scope("grondwerk", {"oppervlakte": 10}, site, ctx)
        assert exc.value.scope == "grondwerk"
        assert exc.value.field == "diepte"

    def test_missing_norm_is_configuration_error(self, site, ctx):
        del ctx.normuren[("grondwerk", "Ontgraven")]
        with pytest.raises(ConfigurationError) as exc:
            compute_scope("grondwerk", {"oppervlakte": 10}, site, ctx)
        assert exc.value.scope == "grondwerk"
        assert exc.value.key == "grondwerk/Ontgraven"


# ---------------------------------------------------------------------------
# Other construction scopes
# ---------------------------------------------------------------------------

class TestBestrating:

    def test_tiles_with_cutting(self, site, ctx):
        facts = compute_scope(
            "bestrating", {"oppervlakte": 20, "type_bestrating": "tegel", "snijwerk": "gemiddeld"}, site, ctx
        )
        assert [f.hoeveelheid for f in facts] == [8.5, 2.0, 1.0]
        assert facts[2].sleutel == "Straatzand"

    def test_foundation_and_zones(self, site, ctx):
        facts = compute_scope(
            "bestrating",
            {
                "oppervlakte": 20,
                "fundering": "oprit",
                "zones": [{"type": "terrein", "oppervlakte": 10}],
            },
            site,
            ctx,
        )
        lagen = [(f.sleutel, f.hoeveelheid) for f in facts if f.type == "materiaal"]
        assert lagen == [
            ("Straatzand", 1.0),
            ("Puingranulaat 0-31,5", 4.0),
            ("Brekerszand", 1.0),
            ("Puingranulaat 0-31,5", 3.5),
            ("Brekerszand", 0.5),
            ("Stabiliser (cement)", 0.5),
        ]
        assert facts[-1].omschrijving.startswith("Zone terrein: ")

    def test_paving_product_uses_catalog_unit(self, site, ctx):
        facts = compute_scope(
            "bestrating",
            {"oppervlakte": 10, "type_bestrating": "klinker", "product": "Klinker waalformaat rood", "stuks_per_m2": 50},
            site,
            ctx,
        )
        klinkers = [f for f in facts if f.sleutel == "Klinker waalformaat rood"][0]
        assert klinkers.hoeveelheid == 500
        assert klinkers.eenheid == "stuk"

    def test_unknown_paving_product(self, site, ctx):
        with pytest.raises(ConfigurationError) as exc:
            compute_scope("bestrating", {"oppervlakte": 10, "product": "Gouden tegel"}, site, ctx)
        assert exc.value.scope == "bestrating"


def test_borders(site, ctx):
    facts = compute_scope(
        "borders",
        {"oppervlakte": 10, "beplantingsintensiteit": "veel", "afwerking": "schors", "bodemverbetering": True},
        site,
        ctx,
    )
    assert [(f.sleutel, f.hoeveelheid) for f in facts] == [
        (None, 2.0),
        (None, 4.0),
        ("Bodembedekker (pot 9cm)", 100),
        (None, 0.75),
        ("Boomschors 10-40mm", 0.5),
        ("Tuinaarde", 3.0),
    ]


def test_gras_zaaien(site, ctx):
    facts = compute_scope("gras", {"oppervlakte": 100, "type": "zaaien"}, site, ctx)
    assert [f.hoeveelheid for f in facts] == [15.0, 5.0, 3.5]
    assert facts[2].sleutel == "Graszaad siergazon"


def test_gras_kunstgras_wins_over_type(site, ctx):
    facts = compute_scope("gras", {"oppervlakte": 10, "type": "zaaien", "kunstgras": True}, site, ctx)
    assert [f.sleutel for f in facts if f.type == "materiaal"] == ["Kunstgras"]


def test_houtwerk_schutting(site, ctx):
    facts = compute_scope("houtwerk", {"type_houtwerk": "schutting", "afmeting": 10}, site, ctx)
    assert [(f.sleutel, f.hoeveelheid) for f in facts] == [
        (None, 8.0),
        ("Schuttingplank 180x15cm", 60),
        ("Schuttingpaal 7x7x270cm", 6),
        (None, 3.0),
        ("Betonpoer 30x30x30cm", 6),
    ]


def test_houtwerk_vlonder(site, ctx):
    facts = compute_scope("houtwerk", {"type_houtwerk": "vlonder", "afmeting": 10}, site, ctx)
    assert [(f.sleutel, f.hoeveelheid) for f in facts] == [
        (None, 6.0),
        ("Vlonderdeel hardhout 21x145mm", 70),
        (None, 4.5),
        ("Betonpoer 30x30x30cm", 9),  # 5 posts + 4 corner points
    ]


def test_houtwerk_pergola_heavy_foundation(site, ctx):
    facts = compute_scope(
        "houtwerk", {"type_houtwerk": "pergola", "afmeting": 2, "fundering": "zwaar"}, site, ctx
    )
    assert [(f.sleutel, f.hoeveelheid) for f in facts] == [
        (None, 8.0),
        (None, 6.5),
        ("Betonpoer 30x30x30cm", 8),
    ]


def test_water_elektra(site, ctx):
    assert compute_scope("water_elektra", {"verlichting": "geen", "aantal_punten": 4}, site, ctx) == []

    facts = compute_scope("water_elektra", {"verlichting": "basis", "aantal_punten": 4}, site, ctx)
    assert [f.hoeveelheid for f in facts] == [6.0, 2.0, 4.0, 20, 2.0, 4, 4]


def test_specials(site, ctx):
    facts = compute_scope(
        "specials",
        {"items": [{"type": "jacuzzi"}, {"type": "sauna", "aantal": 2, "omschrijving": "Barrelsauna"}]},
        site,
        ctx,
    )
    assert [(f.omschrijving, f.hoeveelheid) for f in facts] == [
        ("Jacuzzi plaatsen", 8.0),
        ("Barrelsauna (2x)", 12.0),
    ]


# ---------------------------------------------------------------------------
# Maintenance scopes
# ---------------------------------------------------------------------------

class TestOnderhoud:

    def test_backlog_scales_mowing(self, ctx):
        site = SiteConditions(achterstalligheid=1.6)
        facts = compute_scope("gras_onderhoud", {"oppervlakte": 200}, site, ctx)
        assert facts[0].hoeveelheid == 6.5

    def test_borders_weeding_uses_soil_factor(self, ctx):
        site = SiteConditions(achterstalligheid=1.3)
        facts = compute_scope("borders_onderhoud", {"oppervlakte": 10, "bodem": "open"}, site, ctx)
        assert facts[0].hoeveelheid == 2.25

    def test_heggen_species_factor(self, site, ctx):
        facts = compute_scope(
            "heggen", {"lengte": 10, "hoogte": 1.5, "breedte": 1, "haagsoort": "taxus"}, site, ctx
        )
        assert facts[0].hoeveelheid == 3.0

    def test_heggen_trimmings_and_frequency(self, site, ctx):
        facts = compute_scope(
            "heggen",
            {"lengte": 10, "hoogte": 1.5, "breedte": 1, "afvoer_snoeisel": True, "snoeifrequentie": 2},
            site,
            ctx,
        )
        d = {f.sleutel: f for f in facts}
        assert facts[0].hoeveelheid == 4.5
        assert d["Afvoer groenafval"].hoeveelheid == 9.0

    def test_tall_hedge_needs_cherry_picker(self, site, ctx):
        facts = compute_scope("heggen", {"lengte": 12, "hoogte": 5, "breedte": 1}, site, ctx)
        hoogwerker = [f for f in facts if f.type == "machine"][0]
        assert hoogwerker.sleutel == "hoogwerker"
        assert hoogwerker.eenheid == "dag"
        assert hoogwerker.hoeveelheid == 2

    def test_zero_hedge_is_empty(self, site, ctx):
        assert compute_scope("heggen", {"lengte": 0, "hoogte": 2, "breedte": 1}, site, ctx) == []

    def test_bomen(self, site, ctx):
        facts = compute_scope(
            "bomen",
            {"aantal_bomen": 2, "hoogteklasse": "hoog", "nabij_straat": True, "inspectie": "gecertificeerd"},
            site,
            ctx,
        )
        assert facts[0].hoeveelheid == 1.75
        assert facts[1].sleutel == "Boominspectie (gecertificeerd)"
        assert facts[1].hoeveelheid == 2

    def test_reiniging_branden_rents_machine(self, site, ctx):
        facts = compute_scope(
            "reiniging", {"onkruid_bestrating": True, "onkruid_oppervlakte": 50, "onkruid_methode": "branden"}, site, ctx
        )
        assert [f.type for f in facts] == ["arbeid", "machine"]
        assert facts[1].sleutel == "onkruidbrander"

    def test_gras_onderhoud_edges_and_scarifying(self, site, ctx):
        facts = compute_scope(
            "gras_onderhoud", {"oppervlakte": 100, "maaien": False, "kanten_steken": True, "verticuteren": True}, site, ctx
        )
        assert [(f.omschrijving, f.hoeveelheid) for f in facts] == [
            ("Graskanten steken", 2.0),  # 40 m perimeter
            ("Verticuteren", 3.0),
        ]

    def test_borders_pruning_and_green_waste_scale_with_intensity(self, site, ctx):
        facts = compute_scope(
            "borders_onderhoud",
            {
                "oppervlakte": 10,
                "onderhoudsintensiteit": "veel",
                "onkruid_verwijderen": False,
                "snoei": "zwaar",
                "afvoer_groenafval": True,
            },
            site,
            ctx,
        )
        assert [(f.sleutel, f.hoeveelheid) for f in facts] == [
            (None, 2.5),
            ("Afvoer groenafval", 0.65),
        ]

    def test_reiniging_chemical_weeding_and_algae(self, site, ctx):
        facts = compute_scope(
            "reiniging",
            {
                "onkruid_bestrating": True,
                "onkruid_oppervlakte": 100,
                "onkruid_methode": "chemisch",
                "algereiniging": True,
                "alge_oppervlakte": 20,
            },
            site,
            ctx,
        )
        assert [(f.sleutel, f.hoeveelheid) for f in facts] == [
            (None, 1.0),
            ("Onkruidbestrijdingsmiddel", 100),
            (None, 0.5),
            ("Anti-alg middel", 20),
        ]

    def test_reiniging_hot_water_rents_machine(self, site, ctx):
        facts = compute_scope(
            "reiniging", {"onkruid_bestrating": True, "onkruid_oppervlakte": 100, "onkruid_methode": "heet_water"}, site, ctx
        )
        assert [(f.type, f.sleutel, f.hoeveelheid) for f in facts] == [
            ("arbeid", None, 1.5),
            ("machine", "heetwaterapparaat", 1),
        ]

    def test_bemesting_carries_line_margin(self, site, ctx):
        facts = compute_scope("bemesting", {"oppervlakte": 100, "frequentie": 2, "grondanalyse": True}, site, ctx)
        assert all(f.marge_percentage == 70 for f in facts)
        assert facts[0].hoeveelheid == 1.0
        assert facts[1].hoeveelheid == 200

    def test_gazonanalyse_repairs(self, site, ctx):
        facts = compute_scope(
            "gazonanalyse",
            {"oppervlakte": 600, "herstelacties": ["plaggen", "verticuteren", "bijzaaien"], "kale_plekken_m2": 20},
            site,
            ctx,
        )
        assert [(f.type, f.hoeveelheid) for f in facts] == [
            ("arbeid", 0.5),
            ("arbeid", 6.0),
            ("machine", 2),
            ("arbeid", 15.0),
            ("arbeid", 3.0),
            ("arbeid", 0.25),
            ("materiaal", 20),
        ]
        assert facts[2].sleutel == "verticuteermachine"

    def test_mollenbestrijding_package(self, site, ctx):
        facts = compute_scope("mollenbestrijding", {"pakket": "premium_plus"}, site, ctx)
        assert [(f.sleutel, f.hoeveelheid) for f in facts] == [
            (None, 6.0),
            ("Mollenklemmen premium plus", 1),
            (None, 3.0),
        ]

    def test_overig_all_off_is_empty(self, site, ctx):
        assert compute_scope("overig", {}, site, ctx) == []
