"""Handler configuration loading and lookup."""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from amexecutor.exceptions import ConfigurationError, HandlerMissingError
from amexecutor.models.alert import Alert
from amexecutor.models.handlers import HandlersConfig, HandlerSpec

logger = logging.getLogger(__name__)


def load_handlers_config(config_path: str | Path) -> HandlersConfig:
    """Load handlers configuration from YAML file."""
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Handlers config not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(str(path), str(e)) from e

    if not isinstance(data, dict):
        raise ConfigurationError(str(path), "top level must be a mapping")
    data["handlers"] = data.get("handlers") or {}

    try:
        return HandlersConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(str(path), str(e)) from e


class HandlerResolver:
    """Looks up handlers by exact name and applies their status filter."""

    def __init__(self, config: HandlersConfig):
        self._config = config

    @property
    def handlers(self) -> dict[str, HandlerSpec]:
        return self._config.handlers

    def resolve(self, name: str, alert: Alert) -> HandlerSpec | None:
        """Return the handler spec to run for *alert*, or ``None`` to skip it.

        Raises:
            HandlerMissingError: If *name* is not configured.
        """
        spec = self._config.get(name)
        if spec is None:
            raise HandlerMissingError(name)

        if not spec.matches(alert.status):
            logger.info(
                f"Ignoring alert. Status ({alert.status}) does not match "
                f"filter ({spec.status_filter}) of handler {name}"
            )
            return None

        return spec
