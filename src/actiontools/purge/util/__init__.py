from .dt import *

TRUE_OPTIONS = ('yes', 'true', 'y', '1', 'on')
FALSE_OPTIONS = ('no', 'false', 'n', '0', 'off')
BOOLEAN_OPTIONS = TRUE_OPTIONS + FALSE_OPTIONS


def parse_bool(val, default=False) -> bool:
    """
    Convert a boolean-like value (typically an action input or environment variable) to bool.

    Raises:
        ValueError: If the value is not one of the `BOOLEAN_OPTIONS`
    """
    if val is None:
        return default
    if isinstance(val, bool):
        return val

    normalized = str(val).strip().lower()
    if not normalized:
        return default
    if normalized in TRUE_OPTIONS:
        return True
    if normalized in FALSE_OPTIONS:
        return False

    raise ValueError(f"Invalid boolean value `{val}`, use one of: {', '.join(BOOLEAN_OPTIONS)}")
