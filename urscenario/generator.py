"""
Target script generator.

Lowers a ScenarioFile into robot script text:

1. one global constant per enum member (value = ordinal)
2. class-state globals for every class bound by the Given step
3. one ``def Class_method(...)`` procedure per method
4. one ``def check_<name>()`` boolean procedure per check
5. the entry procedure running the Then effect, guarded by the When check

Each section is produced by a pure function returning a tuple of lines;
generate() validates the model and joins the sections.
"""
from typing import Mapping, Optional, Sequence, Tuple

from urscenario.config import GeneratorConfig
from urscenario.diagnostics import debug_log, warn
from urscenario.effects import lower_method_effect, lower_step_effect
from urscenario.expressions import translate
from urscenario.model import (
    Check,
    ClassDef,
    EnumDef,
    ScenarioFile,
    ThenStep,
    WhenStep,
    binding_table,
    bound_classes,
    enum_index,
    first_step,
    validate_scenario,
)

Lines = Tuple[str, ...]

FLOAT_TYPES = ("double", "float")


def zero_value(type_name: str) -> str:
    """Type-appropriate default for a property without an initial value."""
    if type_name.lower() in FLOAT_TYPES:
        return "0.0"
    return "0"


def _indent(lines: Sequence[str], prefix: str) -> Lines:
    return tuple(f"{prefix}{line}" for line in lines)


def _procedure(name: str, params: Sequence[str], body: Sequence[str], config: GeneratorConfig) -> Lines:
    return (f"def {name}({', '.join(params)}):",) + _indent(body, config.indent) + ("end",)


def emit_enum_constants(enums: Sequence[EnumDef]) -> Lines:
    return tuple(
        f"global {e.name}_{member} = {i}"
        for e in enums
        for i, member in enumerate(e.values)
    )


def emit_class_state(classes: Sequence[ClassDef], bound: Sequence[str],
                     enums: Mapping[str, Mapping[str, int]], binding: Mapping[str, str]) -> Lines:
    """Globals for the properties of every bound class, in binding order."""
    by_name = {c.name: c for c in classes}
    lines = []
    for class_name in bound:
        for prop in by_name[class_name].properties:
            if prop.initial is not None:
                value = translate(prop.initial, enums, binding)
            else:
                value = zero_value(prop.type)
            lines.append(f"global {class_name}_{prop.name} = {value}")
    return tuple(lines)


def emit_methods(classes: Sequence[ClassDef], enums: Mapping[str, Mapping[str, int]],
                 config: GeneratorConfig) -> Tuple[Lines, ...]:
    """One procedure per method of every class."""
    procedures = []
    for cls in classes:
        for method in cls.methods:
            body = lower_method_effect(cls, method.effect, enums, comments=config.emit_comments)
            params = [p.name for p in method.inputs]
            procedures.append(_procedure(f"{cls.name}_{method.name}", params, body, config))
    return tuple(procedures)


def emit_checks(checks: Sequence[Check], enums: Mapping[str, Mapping[str, int]],
                binding: Mapping[str, str], config: GeneratorConfig) -> Tuple[Lines, ...]:
    return tuple(
        _procedure(
            f"{config.check_prefix}{chk.name}", (),
            (f"return {translate(chk.predicate, enums, binding)}",), config,
        )
        for chk in checks
    )


def emit_program(when: Optional[WhenStep], then: Optional[ThenStep],
                 enums: Mapping[str, Mapping[str, int]], binding: Mapping[str, str],
                 config: GeneratorConfig, classes: Optional[Mapping[str, ClassDef]] = None) -> Lines:
    """Entry procedure: the Then effect, guarded by the When check when it names one."""
    action = ()
    if then is not None and then.effect is not None:
        action = lower_step_effect(then.effect, enums, binding, classes)
    if when is not None and when.check_name:
        body = (f"if {config.check_prefix}{when.check_name}():",) + _indent(action, config.indent) + ("end",)
    else:
        body = action
    return _procedure(config.entry_name, (), body, config)


def _warn_unbound(scn: ScenarioFile, bound: Sequence[str]):
    for cls in scn.domain.classes:
        if cls.name not in bound and cls.properties and cls.methods:
            warn(
                f"Class {cls.name} is not bound by the Given step; "
                f"its methods reference globals that are never allocated"
            )


def generate(scn: ScenarioFile, config: Optional[GeneratorConfig] = None) -> str:
    """Generate the full target script for a scenario."""
    config = config or GeneratorConfig()
    validate_scenario(scn)

    enums = enum_index(scn.domain)
    binding = binding_table(scn)
    bound = bound_classes(scn)
    debug_log(f"Binding table: {binding}")
    _warn_unbound(scn, bound)

    sections = [
        emit_enum_constants(scn.domain.enums),
        emit_class_state(scn.domain.classes, bound, enums, binding),
    ]
    sections.extend(emit_methods(scn.domain.classes, enums, config))
    sections.extend(emit_checks(scn.checks, enums, binding, config))
    sections.append(emit_program(
        first_step(scn, "When"), first_step(scn, "Then"), enums, binding, config,
        classes={c.name: c for c in scn.domain.classes},
    ))

    script = "\n\n".join("\n".join(section) for section in sections if section)
    debug_log(f"Generated {script.count(chr(10)) + 1} lines for '{scn.scenario}'")
    return script + "\n"
