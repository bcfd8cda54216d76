"""Tests for the trait model and layer editing helpers."""

import random

import pytest

from nftstudio.errors import InvalidDependencyError
from nftstudio.models import (
    Collection,
    Dependency,
    Layer,
    Trait,
    dna_key,
    make_layer,
    add_dependency,
    file_stem,
    normalize_rarities,
    randomize_rarities,
    remove_dependency,
    reorder_layers,
    set_bulk_rarity,
    set_trait_rarity,
    update_dependency,
    snapshot_layers,
    validate_dependencies,
)


class TestLayerEditing:
    def test_make_layer_equal_shares(self):
        layer = make_layer("Eyes", [("a.png", b""), ("b.png", b""), ("c.png", b""), ("d.png", b"")])
        assert [t.rarity for t in layer.traits] == [25, 25, 25, 25]

    def test_make_layer_keeps_given_rarity(self):
        layer = make_layer("Eyes", [Trait("a.png", b"", 10), Trait("b.png", b"", 30)])
        assert [t.rarity for t in layer.traits] == [10, 30]

    def test_reorder_renumbers(self):
        layers = [Layer(name=n, order=i) for i, n in enumerate("ABCD")]
        moved = reorder_layers(layers, 3, 0)
        assert [l.name for l in moved] == ["D", "A", "B", "C"]
        assert [l.order for l in moved] == [0, 1, 2, 3]
        # original list untouched
        assert [l.name for l in layers] == ["A", "B", "C", "D"]

    def test_set_trait_rarity_renormalizes(self):
        layer = make_layer("Bg", [("a.png", b""), ("b.png", b"")])
        set_trait_rarity(layer, 0, 150)
        assert sum(t.rarity for t in layer.traits) == pytest.approx(100)
        assert layer.traits[0].rarity == pytest.approx(75)

    def test_set_trait_rarity_rejects_negative(self):
        layer = make_layer("Bg", [("a.png", b"")])
        with pytest.raises(ValueError):
            set_trait_rarity(layer, 0, -1)

    def test_normalize_all_zero_is_noop(self):
        layer = Layer(name="Bg", traits=[Trait("a.png", b"", 0), Trait("b.png", b"", 0)])
        normalize_rarities(layer)
        assert [t.rarity for t in layer.traits] == [0, 0]

    def test_randomize_sums_to_100(self):
        layer = make_layer("Bg", [("a.png", b""), ("b.png", b""), ("c.png", b"")])
        randomize_rarities(layer, random.Random(3))
        assert sum(t.rarity for t in layer.traits) == pytest.approx(100)


class TestSnapshot:
    def test_snapshot_is_independent(self, scenario_layers):
        snap = snapshot_layers(scenario_layers)
        scenario_layers[0].traits.pop()
        scenario_layers[1].name = "Renamed"
        assert len(snap[0].traits) == 2
        assert snap[1].name == "Eyes"

    def test_snapshot_shares_image_payloads(self, scenario_layers):
        snap = snapshot_layers(scenario_layers)
        assert snap[0].traits[0].image is scenario_layers[0].traits[0].image


class TestValidateDependencies:
    def test_backward_dependency_ok(self, dependent_layers):
        assert validate_dependencies(dependent_layers) is dependent_layers

    def test_forward_dependency_rejected(self, dependent_layers):
        dependent_layers[0].traits[0].dependencies.append(Dependency(1, 0))
        with pytest.raises(InvalidDependencyError, match="not earlier"):
            validate_dependencies(dependent_layers)

    def test_self_layer_dependency_rejected(self, dependent_layers):
        dependent_layers[1].traits[0].dependencies = [Dependency(1, 1)]
        with pytest.raises(InvalidDependencyError):
            validate_dependencies(dependent_layers)

    def test_stale_layer_index(self, dependent_layers):
        dependent_layers[1].traits[0].dependencies = [Dependency(5, 0)]
        with pytest.raises(InvalidDependencyError, match="missing layer"):
            validate_dependencies(dependent_layers)

    def test_stale_trait_index(self, dependent_layers):
        dependent_layers[1].traits[0].dependencies = [Dependency(0, 9)]
        with pytest.raises(InvalidDependencyError, match="missing trait"):
            validate_dependencies(dependent_layers)


class TestMisc:
    def test_dna_key_joins_in_order(self):
        assert dna_key({"Background": "Blue.png", "Eyes": "Laser.png"}) == "Blue.png-Laser.png"

    def test_display_name_strips_extension(self):
        assert Trait("Laser.png", b"").display_name == "Laser"

    def test_collection_file_stem(self):
        assert Collection(name="My  Cool Apes").file_stem == "My_Cool_Apes"

    def test_file_stem_keeps_edge_whitespace(self):
        assert file_stem(" Apes ") == "_Apes_"
        assert file_stem("Cool\t\nApes") == "Cool_Apes"


class TestRarityBulk:
    def test_bulk_sets_every_trait(self):
        layer = make_layer("Bg", [("a.png", b""), ("b.png", b""), ("c.png", b"")])
        set_bulk_rarity(layer, 20)
        assert [t.rarity for t in layer.traits] == [20, 20, 20]

    def test_bulk_rejects_negative(self):
        layer = make_layer("Bg", [("a.png", b"")])
        with pytest.raises(ValueError):
            set_bulk_rarity(layer, -5)


class TestDependencyEditing:
    def test_add_update_remove(self):
        trait = Trait("Hat.png", b"")
        add_dependency(trait, 0, 1)
        add_dependency(trait, 1, 2)
        assert trait.dependencies == [Dependency(0, 1), Dependency(1, 2)]

        assert update_dependency(trait, 0, trait_index=3) == Dependency(0, 3)
        assert update_dependency(trait, 1, layer_index=0) == Dependency(0, 2)

        removed = remove_dependency(trait, 0)
        assert removed == Dependency(0, 3)
        assert trait.dependencies == [Dependency(0, 2)]

    def test_edited_dependency_is_validated(self, dependent_layers):
        antenna = dependent_layers[1].traits[0]
        update_dependency(antenna, 0, layer_index=1)
        with pytest.raises(InvalidDependencyError):
            validate_dependencies(dependent_layers)
