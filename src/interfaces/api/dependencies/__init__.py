"""DI helpers."""

from .caller import (  # noqa: F401
    Caller,
    get_caller,
    get_integration_token,
    get_optional_integration_token,
)
from .container import get_container  # noqa: F401
