"""How mutations react to missing permissions."""

from __future__ import annotations

from sfdml.domain.authorization import DeniedAction

from .env import optional_env_var
from .errors import ConfigurationError


def get_denied_action(default: DeniedAction = DeniedAction.SKIP) -> DeniedAction:
    """Read ``SFDML_ON_DENIED`` (``skip``, ``warn`` or ``raise``)."""

    raw = optional_env_var("SFDML_ON_DENIED")
    if raw is None:
        return default
    try:
        return DeniedAction(raw.lower())
    except ValueError as exc:
        choices = ", ".join(action.value for action in DeniedAction)
        raise ConfigurationError(f"SFDML_ON_DENIED must be one of {choices}, got {raw!r}") from exc
