_STRING_LIST = {"type": "array", "items": {"type": "string"}}

VIEWS_SCHEMA = {
    "type": "object",
    "properties": {
        "sections": _STRING_LIST,
        "user_roles": _STRING_LIST,
        "resource_scopes": _STRING_LIST,
        "resource_qualifiers": _STRING_LIST,
        "resource_languages": _STRING_LIST,
        "default_tab": {
            "type": "object",
            "properties": {"metrics": _STRING_LIST},
            "additionalProperties": False
        },
        "description": {"type": "string"},
        "widget_properties": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["key"],
                "properties": {
                    "key": {"type": "string", "minLength": 1},
                    "type": {"type": "string"},
                    "default_value": {"type": ["string", "number", "boolean", "null"]},
                    "optional": {"type": "boolean", "default": True},
                    "description": {"type": "string"},
                    "options": _STRING_LIST
                }
            }
        },
        "widget_categories": _STRING_LIST,
        "widget_layout": {"type": "string"},
        "widget_scope": _STRING_LIST,
        "required_measures": {
            "type": "object",
            "properties": {"all_of": _STRING_LIST, "any_of": _STRING_LIST},
            "additionalProperties": False
        }
    },
    "additionalProperties": False
}

MANIFEST_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["id", "name", "version", "module"],
    "properties": {
        "id": {"type": "string", "pattern": r"^/?[a-zA-Z0-9_\-]+$"},
        "name": {"type": "string"},
        "version": {"type": "string"},
        "description": {"type": "string"},
        "module": {"type": "string"},
        "enabled": {"type": "boolean", "default": True},
        "grants": {
            "type": "array",
            "items": {"type": "string"}
        },
        "views": VIEWS_SCHEMA
    },
    "additionalProperties": True
}
