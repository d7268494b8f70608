import jsonschema
import logging

from repomanage.config.schemas import LATEST_VERSION, ROSTER, SCHEMAS

logger = logging.getLogger(__name__)


class ValidationError(jsonschema.ValidationError):
    pass


class VersionError(Exception):
    pass


def validate(config, version=None):
    if version is None:
        version = get_version(config)

    if version > LATEST_VERSION:
        raise VersionError(
            "Configuration version %d is newer than latest known configuration version %d" % (version, LATEST_VERSION)
        )
    if version not in SCHEMAS:
        raise VersionError("Configuration version %d is not supported" % version)

    try:
        jsonschema.validate(config, SCHEMAS[version])
    except jsonschema.ValidationError as e:
        raise ValidationError(e.message) from e


def validate_roster(data):
    try:
        jsonschema.validate(data, ROSTER)
    except jsonschema.ValidationError as e:
        raise ValidationError(e.message) from e


def get_version(config):
    if "version" not in config:
        return LATEST_VERSION

    return config["version"]
