"""
Tests for the reference catalog.

Tests:
- Case-insensitive, alias-aware lookups
- Attribute value checks
- Loading from dicts and files
"""

import dataclasses
import json

import pytest

from ..catalog import (
    AttributeDefinition,
    AttributeType,
    Catalog,
    CatalogError,
    default_catalog,
    load_catalog,
)

CATALOG_DATA = {
    "version": "test-1",
    "mechanics": [
        {
            "name": "zap",
            "aliases": ["z"],
            "category": "damage",
            "attributes": [
                {"name": "power", "aliases": "p", "type": "integer", "required": True,
                 "min": 1, "max": 10},
                {"name": "mode", "type": "choice", "choices": ["fast", "slow"]},
            ],
        },
    ],
    "targeters": [{"name": "Target", "aliases": ["T"]}, "Self"],
    "triggers": ["onAttack"],
    "conditions": [{"name": "day", "alias": "isday"}],
}


class TestLookups:
    """Tests for catalog lookups."""

    def test_case_insensitive(self, catalog):
        assert catalog.get_mechanic("DAMAGE").name == "damage"
        assert catalog.has_trigger("onattack")
        assert catalog.has_condition("MobWithin")

    def test_aliases(self, catalog):
        assert catalog.get_mechanic("e:p").name == "effect:particles"
        assert catalog.get_targeter("PIR").name == "PlayersInRadius"
        assert catalog.get_condition("isday").name == "day"

    def test_unknown_names(self, catalog):
        assert catalog.get_mechanic("teleportall") is None
        assert not catalog.has_targeter("nowhere")

    def test_attribute_lookup_by_alias(self, catalog):
        damage = catalog.get_mechanic("damage")
        assert damage.get_attribute("A").name == "amount"
        assert [a.name for a in damage.required_attributes] == ["amount"]

    def test_default_catalog_is_shared(self):
        assert default_catalog() is default_catalog()

    def test_catalog_is_immutable(self, catalog):
        with pytest.raises(dataclasses.FrozenInstanceError):
            catalog.version = "changed"
        with pytest.raises(TypeError):
            catalog._mechanic_index["new"] = None


class TestAttributeChecks:
    """Tests for AttributeDefinition.check_value."""

    def test_number(self):
        attribute = AttributeDefinition("amount", type=AttributeType.NUMBER, min_value=0)
        assert attribute.check_value("2.5") is None
        assert "expected number" in attribute.check_value("x")
        assert "below the minimum" in attribute.check_value("-1")

    def test_integer(self):
        attribute = AttributeDefinition("ticks", type=AttributeType.INTEGER, max_value=100)
        assert attribute.check_value("20") is None
        assert "expected integer" in attribute.check_value("2.5")
        assert "above the maximum" in attribute.check_value("200")

    def test_boolean_and_choice(self):
        flag = AttributeDefinition("flag", type=AttributeType.BOOLEAN)
        assert flag.check_value("TRUE") is None
        assert flag.check_value("yes") is not None
        mode = AttributeDefinition("mode", type=AttributeType.CHOICE, choices=("fast", "slow"))
        assert mode.check_value("Fast") is None
        assert mode.check_value("medium") is not None

    def test_text_and_placeholders(self):
        assert AttributeDefinition("name").check_value("anything") is None
        number = AttributeDefinition("amount", type=AttributeType.NUMBER)
        assert number.check_value("<skill.var.amount>") is None


class TestLoading:
    """Tests for building catalogs from data and files."""

    def test_from_dict(self):
        catalog = Catalog.from_dict(CATALOG_DATA)
        assert catalog.version == "test-1"
        zap = catalog.get_mechanic("Z")
        assert zap.category == "damage"
        power = zap.get_attribute("p")
        assert power.type == AttributeType.INTEGER
        assert power.required
        assert (power.min_value, power.max_value) == (1, 10)
        assert catalog.has_targeter("t")
        assert catalog.has_targeter("self")
        assert catalog.has_condition("isday")

    def test_from_dict_rejects_bad_data(self):
        with pytest.raises(CatalogError):
            Catalog.from_dict({"mechanics": [{"aliases": ["nameless"]}]})
        with pytest.raises(CatalogError):
            Catalog.from_dict({"mechanics": [{"name": "x", "attributes": [
                {"name": "y", "type": "colour"}
            ]}]})
        with pytest.raises(CatalogError):
            Catalog.from_dict(["not", "a", "mapping"])

    def test_load_json_file(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(CATALOG_DATA), encoding="utf-8")
        assert load_catalog(path).has_mechanic("zap")

    def test_load_yaml_file(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text(
            "mechanics:\n"
            "  - name: zap\n"
            "    attributes:\n"
            "      - {name: power, type: integer, required: true}\n"
            "triggers: [onAttack]\n",
            encoding="utf-8",
        )
        catalog = load_catalog(path)
        assert catalog.get_mechanic("zap").required_attributes[0].name == "power"
        assert catalog.has_trigger("ONATTACK")

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError):
            load_catalog(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("mechanics: [unclosed", encoding="utf-8")
        with pytest.raises(CatalogError):
            load_catalog(path)
