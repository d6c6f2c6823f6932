# ==========================================
# CONFIGURATION
# ==========================================
"""
Generator configuration.

Settings are read from the first existing file among an explicit path,
``urscen.json`` in the working directory and ``~/.urscen/config.json``.
"""
import os

from pydantic import BaseModel, ConfigDict, ValidationError

from urscenario.errors import ScenarioCompileError

CONFIG_FILE = "urscen.json"
USER_CONFIG_FILE = os.path.join("~", ".urscen", "config.json")


class GeneratorConfig(BaseModel):
    """Output options for the script generator."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    entry_name: str = "program"
    check_prefix: str = "check_"
    indent: str = "  "
    emit_comments: bool = True


def config_paths(path=None):
    paths = [CONFIG_FILE, os.path.expanduser(USER_CONFIG_FILE)]
    if path:
        paths.insert(0, path)
    return paths


def load_generator_config(path=None):
    """Load generator configuration; defaults when no config file exists."""
    if path and not os.path.exists(path):
        raise ScenarioCompileError(f"Config file not found: {path}")

    for p in config_paths(path):
        if os.path.exists(p):
            with open(p, "r") as f:
                raw = f.read()
            try:
                return GeneratorConfig.model_validate_json(raw)
            except ValidationError as e:
                raise ScenarioCompileError(
                    f"Invalid config file {p}: {e}",
                    suggestion=f"Allowed keys: {', '.join(GeneratorConfig.model_fields)}",
                ) from e
    return GeneratorConfig()


def dump_generator_config(config):
    return config.model_dump_json(indent=2)
