"""
JSON encoding and decoding of scenario documents.

Field names follow the structured document contract: ``checks[].true``
holds the predicate and unknown fields are ignored.
"""
from pydantic import ValidationError

from urscenario.errors import ScenarioDecodeError
from urscenario.model import ScenarioFile


def _location(error):
    return ".".join(str(part) for part in error.get("loc", ()))


def scenario_from_json(text):
    """Decode a JSON document into a ScenarioFile."""
    try:
        return ScenarioFile.model_validate_json(text)
    except ValidationError as e:
        first = e.errors()[0]
        raise ScenarioDecodeError(
            f"{first.get('msg', 'Invalid document')} ({e.error_count()} error(s))",
            context=_location(first) or None,
            suggestion="Check the document against the scenario field names",
        ) from e


def scenario_to_json(scn, indent=2):
    """Encode a ScenarioFile as JSON text."""
    return scn.model_dump_json(by_alias=True, exclude_none=True, indent=indent)
