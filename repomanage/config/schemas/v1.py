# Schema Version 1
# One profile per course: a git platform, an optional LMS and naming defaults

V1 = {
    "$schema": "http://json-schema.org/schema#",

    "type": "object",
    "properties": {
        # Config version
        "version": {
            "type": "integer",
        },

        # Git platform repositories are created on
        "platform": {
            "type": "object",
            "properties": {
                "name": {
                    "type": "string",
                    "enum": ["github", "gitlab", "gitea", "local"],
                },
                # Platform url (https://github.com, https://gitlab.example.edu)
                "host": {
                    "type": "string",
                },
                # Personal access token
                "token": {
                    "type": "string",
                },
                # Organization or group to create repositories in
                "organization": {
                    "type": "string",
                },
                "user": {
                    "type": "string",
                },
                # GitLab only: grant access by username or by email
                "identity-mode": {
                    "type": "string",
                    "enum": ["username", "email"],
                },
                # Local only: directory holding the bare repositories
                "base-dir": {
                    "type": "string",
                },
            },
            "additionalProperties": False,
        },

        # Learning management system
        "lms": {
            "type": "object",
            "properties": {
                "name": {
                    "type": "string",
                    "enum": ["canvas"],
                },
                # Canvas server (???.instructure.com)
                "host": {
                    "type": "string",
                },
                "token": {
                    "type": "string",
                },
                "course-id": {
                    "type": ["string", "integer"],
                },
            },
            "required": ["name"],
            "additionalProperties": False,
        },

        # Default template for repository names
        "repo-name-template": {
            "type": "string",
        },

        # How many repositories to work on at once
        "concurrency": {
            "type": "integer",
            "minimum": 1,
        },

        # Where clones go: flat, by-group or by-assignment
        "clone-layout": {
            "type": "string",
            "enum": ["flat", "by-group", "by-assignment"],
        },
    },
    "required": ["version"],
    "additionalProperties": False,
}
