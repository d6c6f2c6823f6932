"""
Expression translator.

Expressions are small symbolic strings such as
``light.status == LightStatus.GREEN`` or ``this.properties.xPos + amount``.
They are scanned into a flat list of parts (enum-member references,
property references, literal text) and lowered to target identifiers:

- ``LightStatus.GREEN``          -> ``LightStatus_GREEN``
- ``values.light.status``        -> ``Light_status``  (via Given binding)
- ``light.status``               -> ``Light_status``  (only when ``light`` is bound)
- ``this.properties.xPos``       -> ``Robot_xPos``    (inside a Robot method)

Anything else (numbers, operators, parentheses, unbound dotted names) is
literal text and passes through verbatim.
"""
import re
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict

from urscenario.errors import UnresolvedReferenceError

IDENT = r"[a-zA-Z_]\w*"

SCOPE_BINDING = "binding"
SCOPE_THIS = "this"

THIS_OWNER = "this"


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)


class Literal(_Node):
    text: str


class EnumRef(_Node):
    enum: str
    member: str


class PropRef(_Node):
    """Property reference; `owner` is a bound variable name or `this`."""
    owner: str
    prop: str
    qualified: bool = False
    text: str


Part = Union[EnumRef, PropRef, Literal]


class Expression(_Node):
    parts: Tuple[Part, ...] = ()

    def references(self) -> List[PropRef]:
        return [p for p in self.parts if isinstance(p, PropRef)]


_THIS_PATH = re.compile(rf"\bthis\.properties\.(?P<this_prop>{IDENT})\b")
_BOUND_PATH = re.compile(
    rf"\bvalues\.(?P<qvar>{IDENT})\.(?P<qprop>{IDENT})\b"
    rf"|\b(?P<var>{IDENT})\.(?P<prop>{IDENT})\b"
)


def _enum_pattern(enum_names: Iterable[str]):
    names = sorted(set(enum_names), key=len, reverse=True)
    if not names:
        return None
    enum_alt = "|".join(re.escape(n) for n in names)
    return re.compile(rf"\b(?P<enum>{enum_alt})\.(?P<member>[A-Z_]+)\b")


def _flat(part: Part) -> str:
    if isinstance(part, EnumRef):
        return f"{part.enum}_{part.member}"
    return part.text


def _enum_part(m) -> EnumRef:
    return EnumRef(enum=m.group("enum"), member=m.group("member"))


def _path_part(m) -> PropRef:
    groups = m.groupdict()
    if groups.get("this_prop"):
        return PropRef(owner=THIS_OWNER, prop=groups["this_prop"], text=m.group(0))
    if groups.get("qvar"):
        return PropRef(owner=groups["qvar"], prop=groups["qprop"], qualified=True, text=m.group(0))
    return PropRef(owner=groups["var"], prop=groups["prop"], text=m.group(0))


def _split(parts: Sequence[Part], pattern, make_part) -> List[Part]:
    """Run one rewrite pass over the Literal parts."""
    if pattern is None:
        return list(parts)
    result: List[Part] = []
    for part in parts:
        if not isinstance(part, Literal):
            result.append(part)
            continue
        pos = 0
        for m in pattern.finditer(part.text):
            if m.start() > pos:
                result.append(Literal(text=part.text[pos:m.start()]))
            result.append(make_part(m))
            pos = m.end()
        if pos < len(part.text):
            result.append(Literal(text=part.text[pos:]))
    return result


def _rescan_paths(parts: Sequence[Part]) -> List[Part]:
    """Scan bound paths over the text with enum references already flattened.

    Enum references contain no word boundary, so each one ends up either
    wholly inside a path match or wholly outside it.
    """
    flat_text = "".join(_flat(p) for p in parts)
    enum_spans = []
    pos = 0
    for part in parts:
        end = pos + len(_flat(part))
        if isinstance(part, EnumRef):
            enum_spans.append((pos, end, part))
        pos = end

    def gap(start, end):
        pieces: List[Part] = []
        for span_start, span_end, ref in enum_spans:
            if span_start >= start and span_end <= end:
                if span_start > start:
                    pieces.append(Literal(text=flat_text[start:span_start]))
                pieces.append(ref)
                start = span_end
        if end > start:
            pieces.append(Literal(text=flat_text[start:end]))
        return pieces

    result: List[Part] = []
    pos = 0
    for m in _BOUND_PATH.finditer(flat_text):
        result.extend(gap(pos, m.start()))
        result.append(_path_part(m))
        pos = m.end()
    result.extend(gap(pos, len(flat_text)))
    return result


def parse_expression(text: str, enum_names: Iterable[str] = (), scope: str = SCOPE_BINDING) -> Expression:
    """Scan expression text into parts.

    Binding scope rewrites enum references first and then scans bound
    paths over the rewritten text. `this` scope resolves
    `this.properties.*` first and then enum references.
    """
    parts: List[Part] = [Literal(text=text.strip())] if text.strip() else []
    enum_pattern = _enum_pattern(enum_names)
    if scope == SCOPE_THIS:
        parts = _split(parts, _THIS_PATH, _path_part)
        parts = _split(parts, enum_pattern, _enum_part)
    else:
        parts = _split(parts, enum_pattern, _enum_part)
        parts = _rescan_paths(parts)
    return Expression(parts=tuple(parts))


def lower_part(part: Part, binding: Mapping[str, str], owner: Optional[str] = None) -> str:
    if isinstance(part, Literal):
        return part.text
    if isinstance(part, EnumRef):
        return f"{part.enum}_{part.member}"
    if part.owner == THIS_OWNER and owner is not None:
        return f"{owner}_{part.prop}"
    cls = binding.get(part.owner)
    if cls is None:
        if part.qualified:
            raise UnresolvedReferenceError(
                f"Unknown value: {part.owner}",
                context=part.text,
                suggestion="Bind the variable in the Given step",
            )
        # Not a binding; a dotted literal such as an unrelated name
        return part.text
    return f"{cls}_{part.prop}"


def lower_expression(expr: Expression, binding: Mapping[str, str], owner: Optional[str] = None) -> str:
    """Render an expression as target text.

    `owner` is the class name that `this.properties.*` resolves to.
    """
    return "".join(lower_part(p, binding, owner) for p in expr.parts)


def translate(expr: str, enum_index: Mapping[str, Mapping[str, int]], binding: Mapping[str, str]) -> str:
    """Translate a binding-scope expression to target text."""
    return lower_expression(parse_expression(expr, enum_index.keys()), binding)
