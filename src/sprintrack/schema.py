"""
JSON Schema for persisted store snapshots.

A snapshot is the whole document tree plus a small meta block:

    meta:
      schema_version: 1.0.0
    data:
      projects: {...}
      tasks: {...}
      subtasks: {...}
      users: {...}

Only the reference maps are checked structurally here; entity fields are
validated by the pydantic models when documents are read.
"""
from jsonschema import validate, ValidationError, SchemaError
from packaging import version

from sprintrack.logs import get_logger
from sprintrack.recovery import CorruptionError, FatalError, MigrationNeededError
from sprintrack.version import APP_SCHEMA_VERSION

log = get_logger("schema")

_KEYED = {"type": "object", "additionalProperties": {"type": "object"}}

STORE_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["meta", "data"],
    "properties": {
        "meta": {
            "type": "object",
            "required": ["schema_version"],
            "properties": {"schema_version": {"type": "string"}},
        },
        "data": {
            "type": "object",
            "properties": {
                "projects": {
                    "type": "object",
                    "additionalProperties": {
                        "type": "object",
                        "properties": {
                            "sprint_level": {"type": "integer", "minimum": 1, "maximum": 4},
                            "tasks": {
                                "type": "object",
                                "additionalProperties": {"type": "integer", "minimum": 1, "maximum": 4},
                            },
                        },
                    },
                },
                "tasks": {
                    "type": "object",
                    "additionalProperties": {
                        "type": "object",
                        "properties": {
                            "completed": {"type": "boolean"},
                            "subtasks": {
                                "type": "object",
                                "additionalProperties": {"type": "boolean"},
                            },
                        },
                    },
                },
                "subtasks": _KEYED,
                "users": {
                    "type": "object",
                    "additionalProperties": {
                        "type": "object",
                        "properties": {
                            "projects": {
                                "type": "object",
                                "additionalProperties": {"type": "boolean"},
                            },
                        },
                    },
                },
            },
        },
    },
}

def validate_snapshot(snapshot: dict, source: str = "snapshot") -> None:
    """
    Validate a store snapshot against STORE_SCHEMA and the app schema version.

    Raises:
        CorruptionError: the snapshot does not match the schema.
        MigrationNeededError: the snapshot was written by a newer major schema.
    """
    try:
        validate(instance=snapshot, schema=STORE_SCHEMA)
    except ValidationError as e:
        log.error(f"{source} FAILED validation: {e.message}")
        raise CorruptionError(f"{source} is not a valid store snapshot: {e.message}") from e
    except SchemaError as e:
        raise FatalError(f"Store schema is invalid: {e.message}") from e

    check_schema_version(snapshot["meta"]["schema_version"], source)

def check_schema_version(found: str, source: str = "snapshot") -> None:
    try:
        found_version = version.parse(found)
    except version.InvalidVersion as e:
        raise CorruptionError(f"{source} has an unreadable schema version '{found}'") from e

    app_version = version.parse(APP_SCHEMA_VERSION)
    log.info(f"{source}: {found_version}; APP: {app_version};")
    if found_version.major > app_version.major:
        raise MigrationNeededError(
            f"{source} uses schema {found_version}, newer than the supported {app_version}; upgrade sprintrack"
        )
    if found_version.major < app_version.major:
        raise MigrationNeededError(
            f"{source} uses schema {found_version}, older than the supported {app_version}; migrate data"
        )
