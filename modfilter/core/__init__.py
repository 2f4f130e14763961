"""modfilter Core - Shared constants and validators.

Import specific names from submodules:
    from modfilter.core.constants import ErrorCode, ServicesMode
    from modfilter.core.validators import ValidationError
"""

from modfilter.core import constants, validators

__all__ = [
    "constants",
    "validators",
]
