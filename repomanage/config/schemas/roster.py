# Roster file schema

_MEMBER = {
    "type": "object",
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "name": {"type": "string"},
        "email": {"type": "string"},
        "student-number": {"type": "string"},
        "git-username": {"type": "string"},
        "git-username-status": {
            "type": "string",
            "enum": ["unset", "verified", "invalid"],
        },
        "status": {
            "type": "string",
            "enum": ["active", "inactive"],
        },
        "lms-user-id": {"type": "string"},
        "enrollment-type": {
            "type": "string",
            "enum": ["student", "teacher", "ta", "designer", "observer", "other"],
        },
        "source": {"type": "string"},
        # LMS specific extras, kept as they are
        "custom-fields": {
            "type": "object",
            "additionalProperties": {"type": "string"},
        },
    },
    "required": ["id", "name"],
}

_GROUP = {
    "type": "object",
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "name": {"type": "string"},
        "member-ids": {
            "type": "array",
            "items": {"type": "string"},
        },
        "origin": {
            "type": "string",
            "enum": ["system", "lms", "local"],
        },
        "lms-group-id": {"type": "string"},
    },
    "required": ["id", "name"],
}

_GROUP_SET = {
    "type": "object",
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "name": {"type": "string"},
        "kind": {
            "type": "string",
            "enum": ["system", "lms", "import", "local"],
        },
        "group-ids": {
            "type": "array",
            "items": {"type": "string"},
        },
        "system-type": {
            "type": "string",
            "enum": ["individual_students", "staff"],
        },
        "lms-group-set-id": {"type": "string"},
    },
    "required": ["id", "name", "kind"],
}

_ASSIGNMENT = {
    "type": "object",
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "name": {"type": "string"},
        "group-set-id": {"type": "string"},
        "description": {"type": "string"},
        "assignment-type": {
            "type": "string",
            "enum": ["class_wide", "selective"],
        },
        "repo-name-template": {"type": "string"},
    },
    "required": ["id", "name", "group-set-id"],
}

ROSTER = {
    "$schema": "http://json-schema.org/schema#",

    "type": "object",
    "properties": {
        # Where the data came from; null for local rosters
        "connection": {
            "type": ["object", "null"],
            "properties": {
                "kind": {
                    "type": "string",
                    "enum": ["lms", "csv", "local"],
                },
                "lms-type": {"type": "string"},
                "base-url": {"type": "string"},
                "course-id": {"type": "string"},
                "updated-at": {"type": "string"},
            },
            "required": ["kind"],
        },
        "students": {"type": "array", "items": _MEMBER},
        "staff": {"type": "array", "items": _MEMBER},
        "groups": {"type": "array", "items": _GROUP},
        "group-sets": {"type": "array", "items": _GROUP_SET},
        "assignments": {"type": "array", "items": _ASSIGNMENT},
    },
}
