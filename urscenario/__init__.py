# URScenario - Core Compiler Components
"""
Core modules for the scenario compiler:
- errors: Error kinds raised during decoding, parsing and generation
- model: Pydantic domain model of a scenario and its invariants
- expressions: Symbolic expression scanner and translator
- effects: Method/step effect parsing and lowering
- blocks: Balanced block scanning for the notation
- grammar: Lark grammar for the notation
- notation: Notation parser and pretty-printer
- json_codec: Structured (JSON) document codec
- generator: Target script generation
- introspection: Procedure listing for notation files
"""

from .errors import ScenarioCompileError
from .model import ScenarioFile, validate_scenario
from .expressions import translate
from .notation import parse_notation, print_notation
from .json_codec import scenario_from_json, scenario_to_json
from .generator import generate
from .config import GeneratorConfig, load_generator_config
from .introspection import ProcedureExtractor

__all__ = [
    'ScenarioCompileError',
    'ScenarioFile',
    'validate_scenario',
    'translate',
    'parse_notation',
    'print_notation',
    'scenario_from_json',
    'scenario_to_json',
    'generate',
    'GeneratorConfig',
    'load_generator_config',
    'ProcedureExtractor',
]
