"""
Scenario domain model.

Pydantic models for a robot-control scenario: enumerations, stateful
classes, named checks and the Given/When/Then steps. Instances are frozen;
transformations always build a new ScenarioFile.
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator

from urscenario.errors import (
    ScenarioValidationError,
    UnknownClassReference,
    UnresolvedReferenceError,
)

ENUM_TYPE_PREFIX = "enums."
CHECK_REF_PREFIX = "checks."
STEP_KINDS = ("Given", "When", "Then")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class EnumDef(_Frozen):
    """Enumeration; member order defines the generated integer encoding."""
    name: str
    values: List[str] = Field(default_factory=list)


class ParamDef(_Frozen):
    name: str
    type: str


class PropertyDef(_Frozen):
    """Class property. `type` is a primitive tag or `enums.<EnumName>`."""
    name: str
    type: str
    mutable: bool = False
    initial: Optional[str] = None

    @property
    def enum_name(self) -> Optional[str]:
        if self.type.startswith(ENUM_TYPE_PREFIX):
            return self.type[len(ENUM_TYPE_PREFIX):]
        return None


class MethodDef(_Frozen):
    name: str
    inputs: List[ParamDef] = Field(default_factory=list)
    effect: str


class ClassDef(_Frozen):
    name: str
    properties: List[PropertyDef] = Field(default_factory=list)
    methods: List[MethodDef] = Field(default_factory=list)

    def property_names(self):
        return [p.name for p in self.properties]


class Domain(_Frozen):
    enums: List[EnumDef] = Field(default_factory=list)
    classes: List[ClassDef] = Field(default_factory=list)


class Check(_Frozen):
    """Named boolean predicate; serialised under the JSON key `true`."""
    name: str
    predicate: str = Field(alias="true")


class ValueRef(_Frozen):
    """Given-step binding of an instance variable to a class name."""
    name: str
    type: str


class _StepBase(_Frozen):
    """Common base of the step variants; keywords are matched case-insensitively."""

    @field_validator("keyword", mode="before", check_fields=False)
    @classmethod
    def normalise_keyword(cls, value):
        if isinstance(value, str):
            return value.capitalize()
        return value


class GivenStep(_StepBase):
    keyword: Literal["Given"] = "Given"
    values: List[ValueRef] = Field(default_factory=list)

    @field_validator("values", mode="before")
    @classmethod
    def null_values(cls, value):
        return [] if value is None else value


class WhenStep(_StepBase):
    keyword: Literal["When"] = "When"
    condition: Optional[str] = None

    @property
    def check_name(self) -> Optional[str]:
        """Referenced check name; None for a bare When."""
        if self.condition is None:
            return None
        cond = self.condition.strip()
        if cond.startswith(CHECK_REF_PREFIX):
            return cond[len(CHECK_REF_PREFIX):]
        return cond


class ThenStep(_StepBase):
    keyword: Literal["Then"] = "Then"
    effect: Optional[str] = None


def _step_tag(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        keyword = value.get("keyword")
    else:
        keyword = getattr(value, "keyword", None)
    if not isinstance(keyword, str):
        return None
    keyword = keyword.capitalize()
    return keyword if keyword in STEP_KINDS else None


Step = Annotated[
    Union[
        Annotated[GivenStep, Tag("Given")],
        Annotated[WhenStep, Tag("When")],
        Annotated[ThenStep, Tag("Then")],
    ],
    Discriminator(_step_tag),
]


class ScenarioFile(_Frozen):
    """Root document: title, checks, domain and steps."""
    scenario: str
    checks: List[Check] = Field(default_factory=list)
    domain: Domain = Field(default_factory=Domain)
    steps: List[Step] = Field(default_factory=list)


# ==========================================
# Lookups
# ==========================================

def enum_index(domain: Domain) -> Dict[str, Dict[str, int]]:
    """Map enum name -> member -> ordinal."""
    return {e.name: {v: i for i, v in enumerate(e.values)} for e in domain.enums}


def first_step(scn: ScenarioFile, kind: str):
    """Return the first step of the given kind, or None."""
    for step in scn.steps:
        if step.keyword == kind:
            return step
    return None


def binding_table(scn: ScenarioFile) -> Dict[str, str]:
    """Map Given variable name -> class name, in declaration order."""
    given = first_step(scn, "Given")
    if given is None:
        return {}
    return {v.name: v.type for v in given.values}


def bound_classes(scn: ScenarioFile) -> List[str]:
    """Distinct class names bound by the Given step, first appearance first."""
    seen = []
    for class_name in binding_table(scn).values():
        if class_name not in seen:
            seen.append(class_name)
    return seen


# ==========================================
# Validation
# ==========================================

def _require_unique(names, what, owner=None):
    seen = set()
    for name in names:
        if name in seen:
            where = f" in {owner}" if owner else ""
            raise ScenarioValidationError(
                f"Duplicate {what} '{name}'{where}",
                suggestion=f"Each {what} name must be unique",
            )
        seen.add(name)


def validate_scenario(scn: ScenarioFile) -> ScenarioFile:
    """Check the model invariants; returns the scenario unchanged."""
    domain = scn.domain
    _require_unique([e.name for e in domain.enums], "enum")
    _require_unique([c.name for c in domain.classes], "class")
    _require_unique([c.name for c in scn.checks], "check")

    for e in domain.enums:
        _require_unique(e.values, "enum member", owner=f"enum {e.name}")

    enum_names = {e.name for e in domain.enums}
    for cls in domain.classes:
        _require_unique(cls.property_names(), "property", owner=f"class {cls.name}")
        _require_unique([m.name for m in cls.methods], "method", owner=f"class {cls.name}")
        for method in cls.methods:
            _require_unique(
                [p.name for p in method.inputs], "parameter",
                owner=f"method {cls.name}.{method.name}",
            )
        for prop in cls.properties:
            if prop.enum_name is not None and prop.enum_name not in enum_names:
                raise UnknownClassReference(
                    f"Property {cls.name}.{prop.name} refers to unknown enum '{prop.enum_name}'",
                    context=prop.type,
                    suggestion="Declare the enum in the domain block",
                )

    for kind in STEP_KINDS:
        count = sum(1 for step in scn.steps if step.keyword == kind)
        if count > 1:
            raise ScenarioValidationError(
                f"Scenario has {count} {kind} steps",
                suggestion=f"Use a single {kind} step",
            )

    class_names = {c.name for c in domain.classes}
    given = first_step(scn, "Given")
    if given is not None:
        _require_unique([v.name for v in given.values], "Given variable")
        for ref in given.values:
            if ref.type not in class_names:
                raise UnknownClassReference(
                    f"Given refers to unknown class: {ref.type}",
                    context=f"{ref.name} to {ref.type}",
                    suggestion="Declare the class in the domain block",
                )

    when = first_step(scn, "When")
    if when is not None and when.check_name:
        check_names = {c.name for c in scn.checks}
        if when.check_name not in check_names:
            raise UnresolvedReferenceError(
                f"When condition refers to unknown check '{when.check_name}'",
                context=when.condition,
                suggestion="Reference a declared check as checks.<name>",
            )

    return scn
