"""Schema check for the derived snapshot before it is handed to a panel."""

import jsonschema

SNAPSHOT_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "date": {"type": "string", "pattern": r"^\d{4}-\d{2}-\d{2}$"},
            "count": {"type": "integer", "minimum": 0},
            "success": {"type": "integer", "minimum": 0},
            "failure": {"type": "integer", "minimum": 0},
            "successRate": {"type": "integer", "minimum": 0, "maximum": 100},
        },
        "required": ["date", "count", "success", "failure", "successRate"],
        "additionalProperties": False,
    },
}


class SnapshotValidator:
    """Validates snapshot documents against SNAPSHOT_SCHEMA."""

    def __init__(self, schema=None):
        self._validator = jsonschema.Draft202012Validator(schema or SNAPSHOT_SCHEMA)
        self._stats = {"total": 0, "valid": 0, "invalid": 0}

    def validate(self, document):
        """Returns:
            tuple: (is_valid: bool, errors: list[str])
        """
        self._stats["total"] += 1
        errors = [error.message for error in self._validator.iter_errors(document)]
        if errors:
            self._stats["invalid"] += 1
            return False, errors
        self._stats["valid"] += 1
        return True, []

    def get_stats(self):
        return dict(self._stats)
