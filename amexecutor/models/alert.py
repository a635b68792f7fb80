"""Alertmanager webhook payload models.

The envelope is what Prometheus' Alertmanager POSTs to a ``webhook_config``
receiver.  Only the fields the executor uses are declared; anything else in
the payload is ignored.
"""

from pydantic import BaseModel, ConfigDict, Field


class Alert(BaseModel):
    """A single alert from the webhook payload."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    status: str = Field(default="", description="Alert status, firing or resolved")
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    starts_at: str = Field(default="", alias="startsAt")
    ends_at: str = Field(default="", alias="endsAt")
    generator_url: str = Field(default="", alias="generatorURL")
    timestamp: str = Field(default="", description="When this service processed the alert")

    # Not part of the payload: handler arguments and a JSON snapshot of the
    # alert, both exposed to command templates.
    argv: list[str] = Field(default_factory=list, exclude=True)
    json_text: str = Field(default="", exclude=True)

    @property
    def name(self) -> str:
        return self.labels.get("alertname", "")

    def snapshot(self) -> str:
        """Serialize the alert with its wire field names, without argv."""
        return self.model_dump_json(by_alias=True)


class Event(BaseModel):
    """The webhook envelope grouping one or more alerts."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    version: str = ""
    status: str = ""
    receiver: str = ""
    external_url: str = Field(default="", alias="externalURL")
    group_key: str = Field(default="", alias="groupKey")
    group_labels: dict[str, str] = Field(default_factory=dict, alias="groupLabels")
    common_labels: dict[str, str] = Field(default_factory=dict, alias="commonLabels")
    common_annotations: dict[str, str] = Field(default_factory=dict, alias="commonAnnotations")
    truncated_alerts: int = Field(default=0, alias="truncatedAlerts")
    alerts: list[Alert] = Field(default_factory=list)
