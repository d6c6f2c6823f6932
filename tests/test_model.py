"""
Unit tests for urscenario/model.py and urscenario/json_codec.py.
"""
import json

import pytest

from urscenario.errors import (
    ScenarioDecodeError,
    ScenarioValidationError,
    UnknownClassReference,
    UnresolvedReferenceError,
)
from urscenario.json_codec import scenario_from_json, scenario_to_json
from urscenario.model import (
    Check,
    ClassDef,
    Domain,
    EnumDef,
    GivenStep,
    PropertyDef,
    ScenarioFile,
    ThenStep,
    ValueRef,
    WhenStep,
    binding_table,
    bound_classes,
    enum_index,
    first_step,
    validate_scenario,
)


class TestJsonDecoding:
    """Tests for decoding structured documents."""

    def test_decode_light_scenario(self, light_scenario):
        assert light_scenario.scenario == "Move robot forward when light is green"
        assert [c.name for c in light_scenario.domain.classes] == ["Light", "Robot", "Program"]
        assert light_scenario.domain.enums[0].values == ["GREEN", "RED", "YELLOW"]

    def test_check_predicate_comes_from_true_field(self, light_scenario):
        assert light_scenario.checks == [
            Check(name="isLightGreen", predicate="light.status == LightStatus.GREEN")
        ]

    def test_steps_are_tagged_variants(self, light_scenario):
        given, when, then = light_scenario.steps
        assert isinstance(given, GivenStep)
        assert isinstance(when, WhenStep)
        assert isinstance(then, ThenStep)
        assert when.check_name == "isLightGreen"
        assert then.effect == "call values.prog.whenGreen"

    def test_keyword_is_case_insensitive(self):
        scn = scenario_from_json(
            '{"scenario": "s", "domain": {}, "steps": ['
            '{"keyword": "given", "values": []}, {"keyword": "THEN", "effect": "call values.a.b"}]}'
        )
        assert scn.steps[0].keyword == "Given"
        assert isinstance(scn.steps[1], ThenStep)

    def test_unknown_fields_are_ignored(self):
        scn = scenario_from_json(
            '{"scenario": "s", "author": "x", "domain": {"enums": [], "extra": 1},'
            ' "steps": [{"keyword": "Then", "effect": "call values.a.b", "note": "n"}]}'
        )
        assert scn.steps == [ThenStep(effect="call values.a.b")]

    def test_property_defaults(self):
        scn = scenario_from_json(
            '{"scenario": "s", "domain": {"classes": [{"name": "A",'
            ' "properties": [{"name": "x", "type": "int"}]}]}, "steps": []}'
        )
        prop = scn.domain.classes[0].properties[0]
        assert prop.mutable is False
        assert prop.initial is None

    def test_step_fields_are_optional(self):
        scn = scenario_from_json(
            '{"scenario": "s", "domain": {}, "steps": ['
            '{"keyword": "Given", "values": null}, {"keyword": "When"}, {"keyword": "Then"}]}'
        )
        assert scn.steps == [GivenStep(values=[]), WhenStep(condition=None), ThenStep(effect=None)]
        assert scn.steps[1].check_name is None

    def test_bare_steps_encode_without_fields(self):
        scn = ScenarioFile(scenario="s", steps=[WhenStep(), ThenStep()])
        doc = json.loads(scenario_to_json(scn))
        assert doc["steps"] == [{"keyword": "When"}, {"keyword": "Then"}]
        assert scenario_from_json(scenario_to_json(scn)) == scn

    def test_unknown_keyword_fails(self):
        with pytest.raises(ScenarioDecodeError):
            scenario_from_json('{"scenario": "s", "domain": {}, "steps": [{"keyword": "And"}]}')

    def test_missing_required_field_fails(self):
        with pytest.raises(ScenarioDecodeError) as exc:
            scenario_from_json('{"domain": {}, "steps": []}')
        assert "scenario" in str(exc.value)

    def test_malformed_json_fails(self):
        with pytest.raises(ScenarioDecodeError):
            scenario_from_json('{"scenario": ')


class TestJsonEncoding:
    """Tests for encoding structured documents."""

    def test_predicate_is_encoded_as_true(self, light_scenario):
        doc = json.loads(scenario_to_json(light_scenario))
        assert doc["checks"] == [{"name": "isLightGreen", "true": "light.status == LightStatus.GREEN"}]

    def test_absent_initial_is_omitted(self):
        scn = ScenarioFile(
            scenario="s",
            domain=Domain(classes=[ClassDef(name="A", properties=[PropertyDef(name="x", type="int")])]),
        )
        doc = json.loads(scenario_to_json(scn))
        assert doc["domain"]["classes"][0]["properties"][0] == {"name": "x", "type": "int", "mutable": False}

    def test_round_trip_is_fixed_point(self, light_scenario, light_json):
        encoded = scenario_to_json(light_scenario)
        assert scenario_from_json(encoded) == light_scenario
        assert json.loads(encoded) == json.loads(scenario_to_json(scenario_from_json(encoded)))

    def test_field_values_survive_round_trip(self, light_json):
        original = json.loads(light_json)
        encoded = json.loads(scenario_to_json(scenario_from_json(light_json)))
        assert encoded["checks"] == original["checks"]
        assert encoded["domain"]["enums"] == original["domain"]["enums"]
        assert encoded["steps"] == original["steps"]


class TestLookups:
    """Tests for enum index and binding helpers."""

    def test_enum_index_uses_ordinals(self, light_scenario):
        assert enum_index(light_scenario.domain) == {"LightStatus": {"GREEN": 0, "RED": 1, "YELLOW": 2}}

    def test_binding_table(self, light_scenario):
        assert binding_table(light_scenario) == {"robot": "Robot", "light": "Light", "prog": "Program"}

    def test_bound_classes_are_distinct_in_order(self):
        scn = ScenarioFile(
            scenario="s",
            steps=[GivenStep(values=[
                ValueRef(name="a", type="B"), ValueRef(name="b", type="A"), ValueRef(name="c", type="B"),
            ])],
        )
        assert bound_classes(scn) == ["B", "A"]

    def test_no_given_step(self):
        scn = ScenarioFile(scenario="s", steps=[ThenStep(effect="call values.a.b")])
        assert binding_table(scn) == {}
        assert first_step(scn, "When") is None

    def test_models_are_frozen(self, light_scenario):
        with pytest.raises(Exception):
            light_scenario.scenario = "other"


class TestValidation:
    """Tests for validate_scenario()."""

    def test_light_scenario_is_valid(self, light_scenario):
        assert validate_scenario(light_scenario) is light_scenario

    def test_duplicate_step_kind_is_rejected(self, light_scenario):
        scn = light_scenario.model_copy(
            update={"steps": light_scenario.steps + [ThenStep(effect="call values.robot.addToXPos with 1")]}
        )
        with pytest.raises(ScenarioValidationError, match="Then"):
            validate_scenario(scn)

    def test_given_unknown_class(self, light_scenario):
        scn = light_scenario.model_copy(
            update={"steps": [GivenStep(values=[ValueRef(name="arm", type="Arm")])]}
        )
        with pytest.raises(UnknownClassReference, match="Arm"):
            validate_scenario(scn)

    def test_property_unknown_enum(self):
        scn = ScenarioFile(
            scenario="s",
            domain=Domain(classes=[
                ClassDef(name="A", properties=[PropertyDef(name="mode", type="enums.Mode")])
            ]),
        )
        with pytest.raises(UnknownClassReference, match="Mode"):
            validate_scenario(scn)

    def test_when_unknown_check(self, light_scenario):
        scn = light_scenario.model_copy(
            update={"steps": [light_scenario.steps[0], WhenStep(condition="checks.isLightRed")]}
        )
        with pytest.raises(UnresolvedReferenceError, match="isLightRed"):
            validate_scenario(scn)

    def test_duplicate_enum_member(self):
        scn = ScenarioFile(
            scenario="s",
            domain=Domain(enums=[EnumDef(name="E", values=["A", "B", "A"])]),
        )
        with pytest.raises(ScenarioValidationError, match="enum member 'A'"):
            validate_scenario(scn)

    def test_duplicate_class(self):
        scn = ScenarioFile(
            scenario="s",
            domain=Domain(classes=[ClassDef(name="A"), ClassDef(name="A")]),
        )
        with pytest.raises(ScenarioValidationError, match="class 'A'"):
            validate_scenario(scn)

    def test_when_without_condition_is_valid(self, light_scenario):
        scn = light_scenario.model_copy(update={"steps": [light_scenario.steps[0], WhenStep()]})
        assert validate_scenario(scn) is scn
