"""Dispatching of alerts to their handler commands."""

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from amexecutor.exceptions import (
    AlertExecutorError,
    CommandError,
    EmptyHandlerError,
    HandlerArgumentsError,
    HandlerMissingError,
)
from amexecutor.executor import CommandExecutor
from amexecutor.handlers import HandlerResolver
from amexecutor.models.alert import Alert, Event
from amexecutor.models.handlers import ALL_HANDLER, DEFAULT_HANDLER
from amexecutor.templating import build_command

logger = logging.getLogger(__name__)

HANDLER_ANNOTATION = "handler"

# Missing handlers with these names are not errors.
OPTIONAL_HANDLERS = frozenset({DEFAULT_HANDLER, ALL_HANDLER})


def primary_handler(alert: Alert) -> list[str]:
    """Handler named by the alert's annotation, or the default handler."""
    if HANDLER_ANNOTATION not in alert.annotations:
        logger.info(f"{alert.name} does not have handler annotation trying default")
        return [DEFAULT_HANDLER]
    return alert.annotations[HANDLER_ANNOTATION].split()


def all_handler(alert: Alert) -> list[str]:
    return [ALL_HANDLER]


# Handler invocations made for every alert, in order.  Each step returns the
# handler name followed by its arguments.
HANDLER_CHAIN: tuple[Callable[[Alert], list[str]], ...] = (primary_handler, all_handler)


class Outcome(str, enum.Enum):
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class InvocationResult:
    """Result of running one handler for one alert."""

    handler: list[str]
    outcome: Outcome
    output: bytes = b""
    error: AlertExecutorError | None = None


@dataclass
class DispatchResult:
    """Aggregated result of dispatching one event."""

    output: bytes = b""
    errors: int = 0
    invocations: list[InvocationResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.errors == 0


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class AlertDispatcher:
    """Runs the configured handler commands for each alert of an event."""

    def __init__(
        self,
        resolver: HandlerResolver,
        executor: CommandExecutor,
        chain: tuple[Callable[[Alert], list[str]], ...] = HANDLER_CHAIN,
    ):
        self._resolver = resolver
        self._executor = executor
        self._chain = chain

    async def dispatch(self, event: Event) -> DispatchResult:
        """Run handlers for every alert of *event*.

        Failures are recorded in the result and never stop the remaining
        handlers or alerts.
        """
        result = DispatchResult()
        out = bytearray()

        for alert in event.alerts:
            logger.info(f"Processing Alert: {alert.name}")
            alert = alert.model_copy(update={"timestamp": _now()})
            alert = alert.model_copy(update={"json_text": alert.snapshot()})

            for step in self._chain:
                invocation = await self.invoke(step(alert), alert)
                if invocation is None:
                    continue
                result.invocations.append(invocation)

                if invocation.error is not None:
                    logger.error(invocation.error.message)
                    out += f"{invocation.error.message}\n".encode()
                    result.errors += 1
                if invocation.output:
                    out += invocation.output

        result.output = bytes(out)
        return result

    async def invoke(self, handler: list[str], alert: Alert) -> InvocationResult | None:
        """Resolve, render and execute one handler for *alert*.

        Returns ``None`` when an optional handler is not configured.
        """
        if not handler:
            return InvocationResult(handler, Outcome.FAILED, error=EmptyHandlerError())

        name = handler[0]
        try:
            spec = self._resolver.resolve(name, alert)
        except HandlerMissingError as e:
            if name in OPTIONAL_HANDLERS:
                return None
            return InvocationResult(handler, Outcome.FAILED, error=e)

        if spec is None:
            return InvocationResult(handler, Outcome.SKIPPED)

        try:
            path, args = build_command(handler, spec.command, alert)
        except AlertExecutorError as e:
            return InvocationResult(handler, Outcome.FAILED, error=HandlerArgumentsError(e))

        try:
            execution = await self._executor.execute(path, args)
        except CommandError as e:
            return InvocationResult(handler, Outcome.FAILED, output=e.output, error=e)

        outcome = Outcome.SKIPPED if execution.skipped else Outcome.SUCCEEDED
        return InvocationResult(handler, outcome, output=execution.output)
