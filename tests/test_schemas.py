"""
Tests for the design packet schema contracts
=============================================

Covers parsing of untrusted model output and the JSON schema sent to the model.
"""

import json

import pytest

from spec_factory.ai_pipeline.schemas import (
    SPEC_REQUIRED_FIELDS,
    DesignPacket,
    ProductSpec,
    SchemaParseError,
    SelfCheckResult,
    audit_response_schema,
    code_response_schema,
    parse_code,
    parse_self_check,
    parse_spec,
    spec_response_schema,
)

from conftest import SAMPLE_CODE, sample_spec


# =============================================================================
# parse_spec Tests
# =============================================================================

class TestParseSpec:
    """Tests for decoding spec JSON."""

    def test_parses_full_spec(self):
        spec = parse_spec(json.dumps(sample_spec()))
        assert spec.product_name == "HaptiGuide Band"
        assert spec.product_type == "physical"
        assert len(spec.diagrams_plan) == 3
        assert spec.diagrams_plan[1].diagram_type == "exploded"
        assert spec.parts_list[0].material_or_tech == "VL53L1X"
        assert spec.constraints.weight_limits == "< 60g"

    def test_missing_sub_objects_are_defaulted(self):
        raw = sample_spec()
        for key in ("constraints", "diagramsPlan", "partsList"):
            del raw[key]

        spec = parse_spec(json.dumps(raw))

        assert spec.constraints is not None
        assert spec.constraints.environment is None
        assert spec.diagrams_plan == []
        assert spec.parts_list == []

    def test_null_sub_objects_are_defaulted(self):
        spec = parse_spec(sample_spec(constraints=None, diagramsPlan=None, partsList=None))
        assert spec.constraints.model_dump() == {
            "environment": None,
            "size_limits": None,
            "weight_limits": None,
            "power_or_battery": None,
            "safety": None,
            "budget_range": None,
        }
        assert spec.diagrams_plan == []
        assert spec.parts_list == []

    def test_optional_lists_default_empty(self):
        raw = sample_spec()
        del raw["risksAndTradeoffs"]
        raw["validationChecks"] = None
        spec = parse_spec(raw)
        assert spec.risks_and_tradeoffs == []
        assert spec.validation_checks == []

    def test_invalid_json_raises(self):
        with pytest.raises(SchemaParseError):
            parse_spec("{not json")

    def test_empty_text_raises(self):
        # "{}" has no product name / type / summary
        with pytest.raises(SchemaParseError):
            parse_spec("")

    def test_non_object_raises(self):
        with pytest.raises(SchemaParseError):
            parse_spec("[1, 2, 3]")

    def test_unknown_product_type_raises(self):
        with pytest.raises(SchemaParseError):
            parse_spec(sample_spec(productType="spaceship"))

    def test_part_requires_name_and_description(self):
        raw = sample_spec(partsList=[{"name": "Strap"}])
        with pytest.raises(SchemaParseError):
            parse_spec(raw)

    def test_round_trips_with_camel_case_aliases(self):
        spec = parse_spec(sample_spec())
        dumped = spec.model_dump(by_alias=True)
        assert dumped["productName"] == "HaptiGuide Band"
        assert dumped["diagramsPlan"][0]["descriptionForImageModel"] == "Band seen from above"

    def test_untitled_plan_entry_is_kept_with_empty_title(self):
        plan = sample_spec()["diagramsPlan"] + [{"diagramType": "top", "descriptionForImageModel": "no title"}]
        spec = parse_spec(sample_spec(diagramsPlan=plan))
        assert len(spec.diagrams_plan) == 4
        assert spec.diagrams_plan[3].title == ""

    def test_malformed_plan_entries_are_dropped(self):
        plan = sample_spec()["diagramsPlan"] + [
            "Top View",
            {"diagramType": "isometric", "title": "Iso"},
            {"title": "No type"},
        ]
        spec = parse_spec(sample_spec(diagramsPlan=plan))
        assert [d.title for d in spec.diagrams_plan] == ["Top View", "Exploded View", "Side Profile"]

    def test_best_effort_part_fields_degrade_to_none(self):
        raw = sample_spec()
        raw["partsList"][0].update(quantity="2 per band", estimatedDimensions={"w": 5}, roleInSystem=None)
        raw["partsList"][1].update(quantity="3", materialOrTech=42)

        spec = parse_spec(raw)

        assert spec.parts_list[0].quantity is None
        assert spec.parts_list[0].estimated_dimensions is None
        assert spec.parts_list[1].quantity == 3.0
        assert spec.parts_list[1].material_or_tech == "42"


# =============================================================================
# Audit / code parsing
# =============================================================================

class TestParseSelfCheck:

    def test_parses_issues_and_corrected_spec(self):
        corrected = sample_spec(summary="Fixed summary")
        del corrected["partsList"]
        result = parse_self_check(json.dumps({"issues": ["A", "B"], "correctedSpec": corrected}))

        assert result.issues == ["A", "B"]
        assert result.corrected_spec.summary == "Fixed summary"
        assert result.corrected_spec.parts_list == []

    def test_null_corrected_spec_is_kept(self):
        result = parse_self_check(json.dumps({"issues": [], "correctedSpec": None}))
        assert result.corrected_spec is None

    def test_invalid_json_raises(self):
        with pytest.raises(SchemaParseError):
            parse_self_check("<html>oops</html>")

    def test_effective_spec_falls_back_to_original(self):
        original = parse_spec(sample_spec())
        assert SelfCheckResult(issues=[], corrected_spec=None).effective_spec(original) is original


class TestParseCode:

    def test_parses_code(self):
        code = parse_code(json.dumps(SAMPLE_CODE))
        assert code.language == "cpp"

    def test_missing_field_raises(self):
        with pytest.raises(SchemaParseError):
            parse_code(json.dumps({"language": "cpp"}))


# =============================================================================
# Response schemas
# =============================================================================

class TestResponseSchemas:

    def test_spec_schema_marks_required_subset(self):
        schema = spec_response_schema()
        assert schema["required"] == SPEC_REQUIRED_FIELDS
        assert "diagramsPlan" in schema["properties"]
        assert "additionalProperties" not in json.dumps(schema)

    def test_enum_domains_present(self):
        text = json.dumps(spec_response_schema())
        for value in ("physical", "robotic", "mechanical", "digital", "ui_screen", "exploded"):
            assert f'"{value}"' in text

    def test_diagram_title_property_survives_cleaning(self):
        schema = spec_response_schema()
        diagram = schema["$defs"]["DiagramRequest"]
        assert "title" in diagram["properties"]
        assert diagram["required"] == ["diagramType", "title", "descriptionForImageModel"]

    def test_audit_schema_reuses_spec_definition(self):
        audit = audit_response_schema()
        spec = spec_response_schema()
        assert audit["required"] == ["issues", "correctedSpec"]
        assert audit["$defs"]["ProductSpec"]["properties"] == spec["properties"]

    def test_code_schema_has_three_fields(self):
        schema = code_response_schema()
        assert set(schema["properties"]) == {"language", "code", "explanation"}
        assert set(schema["required"]) == {"language", "code", "explanation"}


class TestDesignPacket:

    def test_final_spec_prefers_corrected(self):
        original = parse_spec(sample_spec())
        corrected = parse_spec(sample_spec(productName="HaptiGuide Band v2"))
        packet = DesignPacket(spec=original, self_check=SelfCheckResult(corrected_spec=corrected))
        assert packet.final_spec.product_name == "HaptiGuide Band v2"

    def test_final_spec_falls_back_to_original(self):
        original = parse_spec(sample_spec())
        packet = DesignPacket(spec=original, self_check=SelfCheckResult())
        assert packet.final_spec is original
