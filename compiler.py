import os

from urscenario.config import GeneratorConfig
from urscenario.diagnostics import debug_log, set_verbose  # noqa: F401
from urscenario.errors import ScenarioCompileError
from urscenario.generator import generate
from urscenario.introspection import ProcedureExtractor
from urscenario.json_codec import scenario_from_json
from urscenario.notation import parse_notation, parse_tree

FORMAT_JSON = "json"
FORMAT_NOTATION = "notation"
JSON_EXTENSIONS = (".json",)


def detect_format(file_path):
    """Pick the input format from the file extension."""
    _, ext = os.path.splitext(file_path or "")
    return FORMAT_JSON if ext.lower() in JSON_EXTENSIONS else FORMAT_NOTATION


def read_source(file_path):
    if not os.path.exists(file_path):
        raise ScenarioCompileError(f"File not found: {file_path}")
    with open(file_path, 'r') as f:
        return f.read()


def decode_source(source_code, fmt=FORMAT_NOTATION):
    """Decode source text in the given format into a ScenarioFile."""
    if fmt == FORMAT_JSON:
        return scenario_from_json(source_code)
    if fmt == FORMAT_NOTATION:
        return parse_notation(source_code)
    raise ScenarioCompileError(f"Unknown input format: {fmt}", suggestion="Use 'json' or 'notation'")


def load_scenario(file_path, fmt=None):
    """Read and decode a scenario file; the format defaults to the extension's."""
    fmt = fmt or detect_format(file_path)
    debug_log(f"Loading {file_path} as {fmt}")
    return decode_source(read_source(file_path), fmt)


def compile_source(source_code, fmt=FORMAT_NOTATION, config=None):
    """Compile scenario source text into target script text."""
    # STEP 1: DECODE
    scn = decode_source(source_code, fmt)
    debug_log(f"Compiling scenario: {scn.scenario}")

    # STEP 2: GENERATE
    return generate(scn, config or GeneratorConfig())


def compile_file(file_path, fmt=None, config=None):
    """Compile a scenario file into target script text."""
    fmt = fmt or detect_format(file_path)
    return compile_source(read_source(file_path), fmt, config)


def describe_source(source_code, config=None):
    """List the procedures a notation source will generate."""
    config = config or GeneratorConfig()
    tree = parse_tree(source_code)
    extractor = ProcedureExtractor(check_prefix=config.check_prefix, entry_name=config.entry_name)
    return extractor.transform(tree)
