"""
Effect lowering.

Method effects come in two forms:

- assignment: ``set this.properties.xPos to this.properties.xPos + amount``
- raw splice: ``raw: movel(p, 0.5, 0.1);\\nLight_turnGreen()``

Then-step effects are procedure calls
(``call values.robot.addToXPos with double 1.0``) or bound assignments
(``set values.light.status to LightStatus.RED``).

Effects are parsed into Assign / RawSplice / Call nodes and then lowered
into target statements. Lowering returns unindented lines; the generator
owns indentation.
"""
import re
from typing import List, Mapping, Tuple, Union

from pydantic import BaseModel, ConfigDict

from urscenario.errors import (
    UnknownBindingError,
    UnresolvedReferenceError,
    UnsupportedCallError,
    UnsupportedEffectError,
)
from urscenario.expressions import (
    IDENT,
    SCOPE_BINDING,
    SCOPE_THIS,
    THIS_OWNER,
    Expression,
    lower_expression,
    parse_expression,
)

RAW_PREFIX = "raw:"
RAW_SUMMARY_LENGTH = 60

_ASSIGN_THIS = re.compile(rf"set this\.properties\.({IDENT}) to (.+)")
_ASSIGN_VALUES = re.compile(rf"set values\.({IDENT})\.({IDENT}) to (.+)")
_CALL_WITH_ARGS = re.compile(rf"call\s+values\.({IDENT})\.({IDENT})\s+with\s+(.+)")
_CALL_NO_ARGS = re.compile(rf"call\s+values\.({IDENT})\.({IDENT})\s*")
_ARG_SPLIT = re.compile(r"\s*,\s*")
_TYPE_TAG = re.compile(r"^(double|int|bool|string)\s+")
_STATEMENT_SPLIT = re.compile(r"[;\r\n]+")
_LINE_BREAK = re.compile(r"[\r\n]")

# Order matters: CRLF first, then single escapes, escaped backslash last.
_ESCAPES = (
    ("\\r\\n", "\n"),
    ("\\n", "\n"),
    ("\\r", "\r"),
    ("\\t", "\t"),
    ('\\"', '"'),
    ("\\'", "'"),
    ("\\\\", "\\"),
)


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)


class Assign(_Node):
    """`owner` is `this` for method effects or a bound variable for step effects."""
    owner: str
    target: str
    value: Expression
    source: str


class RawSplice(_Node):
    body: str

    def statements(self) -> List[str]:
        segments = (s.strip() for s in _STATEMENT_SPLIT.split(self.body))
        return [s for s in segments if s]


class Call(_Node):
    variable: str
    method: str
    args: Tuple[str, ...] = ()


MethodEffect = Union[Assign, RawSplice]
StepEffect = Union[Assign, Call]


def unescape_backslash_sequences(text: str) -> str:
    """Decode the backslash escapes allowed in raw effect bodies."""
    for escaped, plain in _ESCAPES:
        text = text.replace(escaped, plain)
    return text


def strip_type_tag(token: str) -> str:
    return _TYPE_TAG.sub("", token).strip()


# ==========================================
# Parsing
# ==========================================

def parse_method_effect(effect: str, enum_names=()) -> MethodEffect:
    """Parse a class method effect."""
    trimmed = effect.strip()
    if trimmed[:len(RAW_PREFIX)].lower() == RAW_PREFIX:
        body = unescape_backslash_sequences(trimmed[len(RAW_PREFIX):].strip())
        return RawSplice(body=body)

    m = _ASSIGN_THIS.fullmatch(trimmed)
    if m is None:
        raise UnsupportedEffectError(
            f"Unsupported effect: {effect}",
            context=effect,
            suggestion="Use 'set this.properties.<prop> to <expr>' or a 'raw:' body",
        )
    value = parse_expression(m.group(2), enum_names, scope=SCOPE_THIS)
    return Assign(owner=THIS_OWNER, target=m.group(1), value=value, source=effect)


def parse_step_effect(effect: str, enum_names=()) -> StepEffect:
    """Parse a Then-step effect."""
    trimmed = effect.strip()

    m = _ASSIGN_VALUES.fullmatch(trimmed)
    if m is not None:
        value = parse_expression(m.group(3), enum_names, scope=SCOPE_BINDING)
        return Assign(owner=m.group(1), target=m.group(2), value=value, source=effect)

    m = _CALL_WITH_ARGS.fullmatch(trimmed)
    if m is not None:
        args = tuple(strip_type_tag(t) for t in _ARG_SPLIT.split(m.group(3)))
        return Call(variable=m.group(1), method=m.group(2), args=args)

    m = _CALL_NO_ARGS.fullmatch(trimmed)
    if m is not None:
        return Call(variable=m.group(1), method=m.group(2))

    raise UnsupportedCallError(
        f"Unsupported call: {effect}",
        context=effect,
        suggestion="Use 'call values.<var>.<method>' optionally followed by 'with <args>'",
    )


# ==========================================
# Lowering
# ==========================================

def _summary(body: str) -> str:
    flat = _LINE_BREAK.sub(" ", body)
    if len(flat) > RAW_SUMMARY_LENGTH:
        return f'"{flat[:RAW_SUMMARY_LENGTH]}..."'
    return f'"{flat}"'


def lower_method_effect(cls, effect: str, enum_index: Mapping[str, Mapping[str, int]],
                        comments=True) -> Tuple[str, ...]:
    """Lower the effect of a method declared on class `cls`."""
    node = parse_method_effect(effect, enum_index.keys())

    if isinstance(node, RawSplice):
        lines = [f"# raw effect: {_summary(node.body)}"] if comments else []
        lines.extend(node.statements())
        return tuple(lines)

    declared = set(cls.property_names())
    for name in [node.target] + [r.prop for r in node.value.references() if r.owner == THIS_OWNER]:
        if name not in declared:
            raise UnresolvedReferenceError(
                f"Class {cls.name} has no property '{name}'",
                context=effect,
                suggestion=f"Declare '{name}' on {cls.name}; methods can only address their own class",
            )

    rhs = lower_expression(node.value, {}, owner=cls.name)
    lines = [f"# effect: {effect}"] if comments else []
    lines.append(f"global {cls.name}_{node.target} = {rhs}")
    return tuple(lines)


def _resolve_binding(variable: str, binding: Mapping[str, str], effect: str) -> str:
    cls = binding.get(variable)
    if cls is None:
        raise UnknownBindingError(
            f"Unknown value in call: {variable}",
            context=effect,
            suggestion="Bind the variable in the Given step",
        )
    return cls


def lower_step_effect(effect: str, enum_index: Mapping[str, Mapping[str, int]],
                      binding: Mapping[str, str], classes=None) -> Tuple[str, ...]:
    """Lower a Then-step effect to a single target statement.

    `classes` maps class name to ClassDef; when given, an assigned property
    must be declared on the bound class.
    """
    node = parse_step_effect(effect, enum_index.keys())
    if isinstance(node, Call):
        cls = _resolve_binding(node.variable, binding, effect)
        return (f"{cls}_{node.method}({', '.join(node.args)})",)

    cls = _resolve_binding(node.owner, binding, effect)
    if classes is not None and cls in classes and node.target not in classes[cls].property_names():
        raise UnresolvedReferenceError(
            f"Class {cls} has no property '{node.target}'",
            context=effect,
            suggestion=f"Declare '{node.target}' on {cls}",
        )
    rhs = lower_expression(node.value, binding)
    return (f"global {cls}_{node.target} = {rhs}",)
