"""JSON schema and validation for discography documents."""

from typing import Any, Dict, List

import jsonschema

from ..exceptions import SchemaError

PALETTE_SCHEMA = {
    "title": "color",
    "type": "object",
    "required": ["fg", "bg", "acc"],
    "additionalProperties": False,
    "properties": {
        "fg": {"type": "string", "pattern": "^#[0-9a-fA-F]{6}$"},
        "bg": {"type": "string", "pattern": "^#[0-9a-fA-F]{6}$"},
        "acc": {"type": "string", "pattern": "^#[0-9a-fA-F]{6}$"},
        "mode": {"type": "string", "enum": ["white", "black"]},
    },
}

LINKS_SCHEMA = {
    "title": "url",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        label: {"type": "string", "minLength": 1}
        for label in (
            "Bandcamp",
            "YouTube",
            "YouTube Full Mix",
            "Apple Music",
            "Spotify",
            "Soundcloud",
            "Amazon Music",
            "iHeartRadio",
            "Tencent Music",
        )
    },
}

SONG_SCHEMA = {
    "title": "song",
    "type": "object",
    "required": ["title", "length"],
    "additionalProperties": False,
    "properties": {
        "artist": {"type": "string"},
        "title": {"type": "string"},
        "released": {"type": "string"},
        "bonus": {"type": "boolean"},
        "event": {"type": "boolean"},
        "length": {"type": "integer", "minimum": 1},
        "isrc": {"type": "string"},
        "lyrics": {"type": "boolean"},
        "color": PALETTE_SCHEMA,
        "url": LINKS_SCHEMA,
        "samples": {"type": "array", "items": {"type": "string"}},
        "about": {"type": "string"},
        "artwork": {"type": ["string", "boolean"]},
        "unreleased": {"type": "boolean"},
        "genre": {"type": "string"},
    },
}

ALBUM_SCHEMA = {
    "title": "album",
    "type": "object",
    "required": ["title", "released", "genre", "length", "color", "url", "songs"],
    "additionalProperties": False,
    "properties": {
        "about": {"type": "string"},
        "bcid": {"type": "string"},
        "color": PALETTE_SCHEMA,
        "genre": {"type": "string"},
        "length": {"type": "integer", "minimum": 1},
        "released": {"type": "string"},
        "songs": {"type": "array", "items": {"type": "object"}},
        "title": {"type": "string"},
        "upc": {"type": "string"},
        "url": LINKS_SCHEMA,
        "compilation": {"type": "boolean"},
        "artist": {"type": "string"},
        "single": {"type": "boolean"},
        "unreleased": {"type": "boolean"},
    },
}

ASSIST_SCHEMA = {
    "title": "assist",
    "type": "object",
    "required": ["titlable", "artwork", "url", "role", "released"],
    "additionalProperties": False,
    "properties": {
        "titlable": {"type": "string"},
        "artwork": {"type": "string"},
        "url": {"type": "string"},
        "role": {"type": "string"},
        "released": {"type": "string"},
    },
}

DOCUMENT_SCHEMA = {
    "title": "document",
    "type": "object",
    "required": ["albums", "remixes", "assists"],
    "additionalProperties": False,
    "properties": {
        "albums": {"type": "array", "items": {"type": "object"}},
        "remixes": {"type": "array", "items": {"type": "object"}},
        "assists": {"type": "array", "items": {"type": "object"}},
    },
}

SCHEMAS: Dict[str, Dict[str, Any]] = {
    "document": DOCUMENT_SCHEMA,
    "album": ALBUM_SCHEMA,
    "song": SONG_SCHEMA,
    "assist": ASSIST_SCHEMA,
}

_VALIDATORS = {
    kind: jsonschema.Draft7Validator(schema) for kind, schema in SCHEMAS.items()
}


def _unexpected_keys(instance: Any, schema: Dict[str, Any]) -> List[str]:
    if not isinstance(instance, dict):
        return []
    return sorted(set(instance) - set(schema.get("properties", {})))


def check_record(instance: Any, kind: str) -> None:
    """Check a document object against the schema for its kind.

    Args:
        instance: Parsed JSON value
        kind: One of "document", "album", "song", "assist"

    Raises:
        SchemaError: If the object has unexpected, missing or mistyped keys
    """
    schema = SCHEMAS[kind]
    validator = _VALIDATORS[kind]

    unexpected = _unexpected_keys(instance, schema)
    if unexpected:
        formatted = ", ".join(f'"{key}"' for key in unexpected)
        raise SchemaError(f"{kind.capitalize()} has unexpected keys: {formatted}")

    error = jsonschema.exceptions.best_match(validator.iter_errors(instance))
    if error is None:
        return

    # Nested palette/link objects report their own offending keys
    if error.validator == "additionalProperties" and error.path:
        nested = error.instance
        nested_schema = error.schema
        extra = _unexpected_keys(nested, nested_schema)
        formatted = ", ".join(f'"{key}"' for key in extra)
        where = "/".join(str(part) for part in error.path)
        raise SchemaError(f'{kind.capitalize()} field "{where}" has unexpected keys: {formatted}')

    location = "/".join(str(part) for part in error.absolute_path)
    if location:
        raise SchemaError(f'{kind.capitalize()} field "{location}" is invalid: {error.message}')
    raise SchemaError(f"{kind.capitalize()} is invalid: {error.message}")
