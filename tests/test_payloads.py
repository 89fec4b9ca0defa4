"""Tests for the JSON child-array parsing used by the multipart forms."""

import json

import pytest

from kitchen_stories.errors import ChildPayloadInvalid
from kitchen_stories.services.payloads import parse_ingredient_groups, parse_instructions


class TestIngredientGroups:
    def test_parses_groups(self):
        raw = json.dumps([
            {"group": "Dry", "items": ["flour", "sugar"]},
            {"group": "", "items": ["milk"]},
        ])
        groups = parse_ingredient_groups(raw)
        assert [(g.group, g.items) for g in groups] == [("Dry", ["flour", "sugar"]), ("", ["milk"])]

    @pytest.mark.parametrize("raw", [None, ""])
    def test_missing_is_empty(self, raw):
        assert parse_ingredient_groups(raw) == []

    def test_malformed_json_is_empty_when_lenient(self):
        assert parse_ingredient_groups("[{not json") == []

    def test_non_list_is_empty_when_lenient(self):
        assert parse_ingredient_groups('{"group": "Dry"}') == []

    def test_lenient_skips_bad_entries(self):
        raw = json.dumps([
            {"group": "Dry"},
            "flour",
            {"group": 5, "items": ["salt", 3]},
        ])
        groups = parse_ingredient_groups(raw)
        assert len(groups) == 1
        assert groups[0].group == ""
        assert groups[0].items == ["salt"]

    def test_strict_rejects_malformed_json(self):
        with pytest.raises(ChildPayloadInvalid) as exc_info:
            parse_ingredient_groups("[{not json", strict=True)
        assert exc_info.value.status_code == 422
        assert exc_info.value.error == "Invalid ingredients"

    def test_strict_rejects_wrong_shape(self):
        with pytest.raises(ChildPayloadInvalid):
            parse_ingredient_groups(json.dumps(["flour", "sugar"]), strict=True)

    def test_strict_accepts_valid_payload(self):
        groups = parse_ingredient_groups(json.dumps([{"group": "Dry", "items": ["flour"]}]), strict=True)
        assert groups[0].items == ["flour"]


class TestInstructions:
    def test_parses_steps_in_order(self):
        assert parse_instructions(json.dumps(["Mix", "Bake", "Cool"])) == ["Mix", "Bake", "Cool"]

    def test_malformed_json_is_empty_when_lenient(self):
        assert parse_instructions("Mix then bake") == []

    def test_lenient_drops_non_text_steps(self):
        assert parse_instructions(json.dumps(["Mix", None, {"x": 1}, "Bake"])) == ["Mix", "Bake"]

    def test_strict_rejects_non_list(self):
        with pytest.raises(ChildPayloadInvalid) as exc_info:
            parse_instructions(json.dumps("Mix"), strict=True)
        assert exc_info.value.error == "Invalid instructions"
