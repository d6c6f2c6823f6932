"""
Scenario notation codec.

Converts between the ScenarioFile model and the human-editable builder
notation:

    scenario("Move robot forward when light is green") {
        domain {
            enumType("LightStatus", "GREEN", "RED", "YELLOW")
            klass("Light") {
                prop("status", "enums.LightStatus", mutable = true, initial = "LightStatus.GREEN")
                method("turnRed", effect = "set this.properties.status to LightStatus.RED")
            }
        }
        checks {
            check("isLightGreen", "light.status == LightStatus.GREEN")
        }
        steps {
            given("light" to "Light")
            whenCond("checks.isLightGreen")
            then("call values.light.turnRed")
        }
    }

parse_notation(print_notation(m)) == m for every model.
"""
import re

from lark import Lark, Transformer
from lark.exceptions import UnexpectedInput, VisitError
from pydantic import ValidationError

from urscenario.blocks import check_blocks
from urscenario.diagnostics import debug_log
from urscenario.errors import NotationSyntaxError, ScenarioCompileError, get_line_context
from urscenario.grammar import notation_grammar
from urscenario.model import (
    Check,
    ClassDef,
    Domain,
    EnumDef,
    GivenStep,
    MethodDef,
    ParamDef,
    PropertyDef,
    ScenarioFile,
    ThenStep,
    ValueRef,
    WhenStep,
)

RAW_OPEN = "[["
RAW_CLOSE = "]]"
INDENT = "    "

_UNESCAPE = re.compile(r'\\(.)', re.DOTALL)
_UNESCAPE_MAP = {'n': '\n', 'r': '\r', 't': '\t', '"': '"', '\\': '\\'}


def unquote(token):
    """Decode a quoted notation literal (with its quotes) into plain text."""
    body = token[1:-1]
    return _UNESCAPE.sub(lambda m: _UNESCAPE_MAP.get(m.group(1), m.group(0)), body)


def quote(text):
    """Encode plain text as a quoted notation literal."""
    escaped = (
        text.replace('\\', '\\\\')
        .replace('"', '\\"')
        .replace('\n', '\\n')
        .replace('\r', '\\r')
        .replace('\t', '\\t')
    )
    return f'"{escaped}"'


def _fits_raw_block(text):
    return RAW_CLOSE not in text and not text.endswith("]")


def format_text(text):
    """Quote text, using a raw block for multi-line or triple-quote-bearing text."""
    if ('\n' in text or '"""' in text) and _fits_raw_block(text):
        return f"{RAW_OPEN}{text}{RAW_CLOSE}"
    return quote(text)


# ==========================================
# Notation -> Model
# ==========================================

class NotationTransformer(Transformer):
    """
    Transforms notation parse trees into ScenarioFile models.

    Each section rule returns a (kind, items) pair; the scenario rule merges
    repeated sections in order of appearance.
    """

    def start(self, args):
        return args[0]

    def scenario(self, args):
        """Build the root model from the title and its sections."""
        title, *sections = args
        enums, classes, checks, steps = [], [], [], []
        for kind, items in sections:
            if kind == "domain":
                enums.extend(i for i in items if isinstance(i, EnumDef))
                classes.extend(i for i in items if isinstance(i, ClassDef))
            elif kind == "checks":
                checks.extend(items)
            else:
                steps.extend(items)
        return ScenarioFile(
            scenario=title,
            checks=checks,
            domain=Domain(enums=enums, classes=classes),
            steps=steps,
        )

    def domain_block(self, args):
        return ("domain", list(args))

    def checks_block(self, args):
        return ("checks", list(args))

    def steps_block(self, args):
        return ("steps", list(args))

    def enum_def(self, args):
        """Transform enumType(name, members...)."""
        name, *values = args
        return EnumDef(name=name, values=values)

    def class_def(self, args):
        """Transform klass(name) { prop(...) method(...) }."""
        name, *members = args
        return ClassDef(
            name=name,
            properties=[m for m in members if isinstance(m, PropertyDef)],
            methods=[m for m in members if isinstance(m, MethodDef)],
        )

    def prop_def(self, args):
        """Transform prop(name, type, options...)."""
        name, type_, *options = args
        return PropertyDef(name=name, type=type_, **dict(options))

    def mutable_option(self, args):
        return ("mutable", str(args[0]) == "true")

    def initial_option(self, args):
        return ("initial", args[0])

    def method_def(self, args):
        """Transform method(name, param(...)..., effect = text)."""
        name, *inputs, effect = args
        return MethodDef(name=name, inputs=inputs, effect=effect)

    def param_def(self, args):
        return ParamDef(name=args[0], type=args[1])

    def check_def(self, args):
        return Check(name=args[0], predicate=args[1])

    def given_step(self, args):
        return GivenStep(values=list(args))

    def binding(self, args):
        return ValueRef(name=args[0], type=args[1])

    def when_step(self, args):
        return WhenStep(condition=args[0] if args else None)

    def then_step(self, args):
        return ThenStep(effect=args[0] if args else None)

    def text(self, args):
        """Decode a quoted literal or a raw block."""
        token = args[0]
        if token.type == "RAW_BLOCK":
            return str(token)[len(RAW_OPEN):-len(RAW_CLOSE)]
        return unquote(str(token))


def make_parser():
    """Create the notation parser."""
    return Lark(notation_grammar, parser='earley')


def parse_tree(source):
    """Check block structure and parse notation text into a lark tree."""
    check_blocks(source)

    try:
        return make_parser().parse(source)
    except UnexpectedInput as e:
        line = getattr(e, 'line', None)
        column = getattr(e, 'column', None)
        if line is not None and line < 0:
            line, column = None, None
        raise NotationSyntaxError(
            "Syntax error",
            line_number=line,
            column=column,
            context=get_line_context(source, line),
            suggestion="Check the construct arguments around this line",
        ) from e


def parse_notation(source):
    """Parse notation text into a ScenarioFile."""
    tree = parse_tree(source)
    try:
        scn = NotationTransformer().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, ScenarioCompileError):
            raise e.orig_exc
        if isinstance(e.orig_exc, ValidationError):
            raise NotationSyntaxError(
                f"Invalid {e.rule}: {e.orig_exc}",
            ) from e.orig_exc
        raise

    debug_log(
        f"Parsed notation: {len(scn.domain.enums)} enums, {len(scn.domain.classes)} classes, "
        f"{len(scn.checks)} checks, {len(scn.steps)} steps"
    )
    return scn


# ==========================================
# Model -> Notation
# ==========================================

def _call(name, *args):
    return f"{name}({', '.join(args)})"


def _print_property(prop):
    args = [format_text(prop.name), format_text(prop.type)]
    if prop.mutable:
        args.append("mutable = true")
    if prop.initial is not None:
        args.append(f"initial = {format_text(prop.initial)}")
    return _call("prop", *args)


def _print_method(method):
    args = [format_text(method.name)]
    args.extend(_call("param", format_text(p.name), format_text(p.type)) for p in method.inputs)
    args.append(f"effect = {format_text(method.effect)}")
    return _call("method", *args)


def _optional_text(text):
    return () if text is None else (format_text(text),)


def _print_step(step):
    if isinstance(step, GivenStep):
        return _call("given", *(f"{format_text(v.name)} to {format_text(v.type)}" for v in step.values))
    if isinstance(step, WhenStep):
        return _call("whenCond", *_optional_text(step.condition))
    return _call("then", *_optional_text(step.effect))


def print_notation(scn):
    """Render a ScenarioFile as notation text, one construct per line."""
    pad1, pad2, pad3 = INDENT, INDENT * 2, INDENT * 3
    lines = [f"scenario({format_text(scn.scenario)}) {{"]

    lines.append(f"{pad1}domain {{")
    for enum in scn.domain.enums:
        lines.append(pad2 + _call("enumType", *(format_text(v) for v in [enum.name, *enum.values])))
    for cls in scn.domain.classes:
        lines.append(f"{pad2}klass({format_text(cls.name)}) {{")
        lines.extend(pad3 + _print_property(p) for p in cls.properties)
        lines.extend(pad3 + _print_method(m) for m in cls.methods)
        lines.append(f"{pad2}}}")
    lines.append(f"{pad1}}}")

    lines.append(f"{pad1}checks {{")
    for chk in scn.checks:
        lines.append(pad2 + _call("check", format_text(chk.name), format_text(chk.predicate)))
    lines.append(f"{pad1}}}")

    lines.append(f"{pad1}steps {{")
    lines.extend(pad2 + _print_step(s) for s in scn.steps)
    lines.append(f"{pad1}}}")

    lines.append("}")
    return "\n".join(lines) + "\n"
