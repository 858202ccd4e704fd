"""
YAML config loader with schema validation.

Loads a simulation config from a YAML file, validates it against the
bundled JSON schema, and maps it onto SimulationConfig. Sections and keys
left out of the file keep their constants.py defaults.
"""

import yaml
import json
from pathlib import Path
from typing import Optional
import jsonschema

from .data_types import (
    EcosimError, Kind, UnknownKindError,
    SimulationConfig, EnergyConfig, PopulationCaps
)


PACKAGE_DIR = Path(__file__).parent
DEFAULT_SCHEMA_PATH = PACKAGE_DIR / "schemas" / "config.schema.json"
DEFAULT_CONFIG_PATH = PACKAGE_DIR / "data" / "default.yaml"

# YAML section/key -> SimulationConfig attribute
_SECTION_FIELDS = {
    'world': {
        'width': 'width',
        'height': 'height',
        'max_entities': 'max_entities',
        'grid_size': 'grid_size',
    },
    'simulation': {
        'logic_rate': 'logic_rate',
        'max_steps_per_frame': 'max_steps_per_frame',
        'frame_rate_scale': 'frame_rate_scale',
        'stats_interval': 'stats_interval',
        'use_grid': 'use_grid',
        'seed': 'seed',
    },
    'probabilities': {
        'plant_spawn': 'plant_spawn_chance',
        'direction_change': 'direction_change_chance',
    },
    'reproduction': {
        'chance': 'reproduce_chance',
        'offspring_jitter': 'offspring_jitter',
    },
}


class ConfigLoadError(EcosimError):
    """Raised when config loading or validation fails"""
    pass


def load_yaml(file_path: Path) -> dict:
    """Load YAML file and return parsed dict (empty file -> {})"""
    file_path = Path(file_path)
    if not file_path.exists():
        raise ConfigLoadError(f"File not found: {file_path}")

    try:
        with open(file_path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"YAML parse error in {file_path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigLoadError(f"Top level of {file_path} must be a mapping")
    return data


def validate_against_schema(data: dict, schema_path: Path, data_path: Path):
    """Validate data dict against JSON schema"""
    schema_path = Path(schema_path)
    if not schema_path.exists():
        print(f"[WARN] Schema {schema_path} not found, skipping validation of {data_path}")
        return

    try:
        with open(schema_path, 'r') as f:
            schema = json.load(f)
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigLoadError(f"Validation error in {data_path} at {location}: {e.message}")
    except json.JSONDecodeError as e:
        raise ConfigLoadError(f"Invalid JSON schema {schema_path}: {e}")


def _parse_kind_counts(counts: dict, section: str) -> dict:
    """Map kind-name keys to ints, rejecting unknown kinds"""
    parsed = {}
    for name, value in counts.items():
        try:
            kind = Kind.parse(name)
        except UnknownKindError as e:
            raise ConfigLoadError(f"{section}: {e}")
        parsed[kind.value] = max(0, int(value))
    return parsed


def config_from_dict(data: dict) -> SimulationConfig:
    """
    Build SimulationConfig from a parsed (and validated) config dict.

    Args:
        data: Dict with optional sections world, simulation, probabilities,
              reproduction, energy, population

    Returns:
        SimulationConfig with defaults for anything missing
    """
    config = SimulationConfig()

    for section, fields in _SECTION_FIELDS.items():
        section_data = data.get(section) or {}
        for key, attribute in fields.items():
            if key in section_data:
                setattr(config, attribute, section_data[key])

    energy_data = data.get('energy') or {}
    try:
        config.energy = EnergyConfig(**energy_data)
    except TypeError as e:
        raise ConfigLoadError(f"energy: {e}")

    population = data.get('population') or {}
    caps = _parse_kind_counts(population.get('caps') or {}, 'population.caps')
    config.caps = PopulationCaps(**caps)

    if 'initial' in population:
        config.initial_population = _parse_kind_counts(population['initial'] or {}, 'population.initial')

    return config


def load_config(file_path: Path, schema_path: Optional[Path] = None) -> SimulationConfig:
    """
    Load simulation config from YAML.

    Args:
        file_path: YAML config file
        schema_path: JSON schema (default: bundled config.schema.json)

    Returns:
        SimulationConfig

    Raises:
        ConfigLoadError: missing file, YAML error, or schema violation
    """
    file_path = Path(file_path)
    data = load_yaml(file_path)

    validate_against_schema(data, schema_path or DEFAULT_SCHEMA_PATH, file_path)

    return config_from_dict(data)


def load_default_config() -> SimulationConfig:
    """Load the bundled default.yaml"""
    return load_config(DEFAULT_CONFIG_PATH)
