import logging

from repomanage.backends import from_config
from repomanage.config import requires_config


logger = logging.getLogger(__name__)


def requires_config_and_platform(func):
    """Provides a platform depending on configuration."""
    @requires_config
    def wrapper(config, cmdargs, *args, **kwargs):

        platform = from_config(config)
        logger.debug("Using %r.", platform)

        return func(config, platform, cmdargs, *args, **kwargs)
    return wrapper
