# phonedeals/services/validation.py
from typing import Any

from phonedeals.domain.errors import ValidationError


def require_int(value: Any, name: str, minimum: int = 0) -> int:
    #bool is an int subclass, "2" and 2.0 are not ints either
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer.", field=name)
    if value < minimum:
        raise ValidationError(f"{name} must be at least {minimum}.", field=name)
    return value
