"""Handler configuration models."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Reserved handler names.  "default" runs when an alert names no handler,
# "all" runs for every alert.
DEFAULT_HANDLER = "default"
ALL_HANDLER = "all"


class HandlerSpec(BaseModel):
    """Command template and status filter of one handler."""

    model_config = ConfigDict(frozen=True)

    command: str = Field(description="Jinja2 template of the command line to execute")
    status: Literal["firing", "resolved", "*", ""] = Field(
        default="",
        description="Alert status that triggers the handler, '*' for any (empty means firing)",
    )

    @property
    def status_filter(self) -> str:
        return self.status or "firing"

    def matches(self, status: str) -> bool:
        return self.status_filter == "*" or self.status_filter == status


class HandlersConfig(BaseModel):
    """Complete handlers configuration."""

    model_config = ConfigDict(frozen=True)

    handlers: dict[str, HandlerSpec] = Field(default_factory=dict)

    def get(self, name: str) -> HandlerSpec | None:
        return self.handlers.get(name)
