from repomanage.config.schemas.roster import ROSTER
from repomanage.config.schemas.v1 import V1

SCHEMAS = {
    1: V1,
}

LATEST_VERSION = max(SCHEMAS)

pyflakes = [ROSTER]
