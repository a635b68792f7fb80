"""Rendering of handler command templates.

Commands are Jinja2 templates rendered against one alert.  The template
context exposes every alert field by name::

    status, labels, annotations, starts_at, ends_at, generator_url,
    timestamp, argv, json

plus ``alert`` (the alert itself) and a ``replace(subject, old, new)``
helper.  ``argv`` holds the words of the ``handler`` annotation after the
handler name and ``json`` is the alert serialized as JSON, e.g.::

    /usr/local/bin/restart {{ argv[0] }} --host {{ replace(labels.instance, ":9100", "") }}
"""

import logging

import jinja2

from amexecutor.argv import tokenize
from amexecutor.exceptions import EmptyCommandError, TemplateRenderError
from amexecutor.models.alert import Alert

logger = logging.getLogger(__name__)


def replace(subject: str, old: str, new: str) -> str:
    """Replace every occurrence of *old* in *subject* with *new*."""
    return str(subject).replace(old, new)


_ENV = jinja2.Environment(autoescape=False)
_ENV.globals["replace"] = replace


def _template_context(alert: Alert) -> dict:
    return {
        "alert": alert,
        "status": alert.status,
        "labels": alert.labels,
        "annotations": alert.annotations,
        "starts_at": alert.starts_at,
        "ends_at": alert.ends_at,
        "generator_url": alert.generator_url,
        "timestamp": alert.timestamp,
        "argv": alert.argv,
        "json": alert.json_text,
    }


def render_command(handler: list[str], template: str, alert: Alert) -> str:
    """Render *template* for *alert* with the handler arguments as ``argv``.

    ``handler[0]`` is the handler name that selected the template and is not
    part of ``argv``.  The caller's alert is left untouched.

    Raises:
        TemplateRenderError: If the template fails to parse or render.
    """
    alert = alert.model_copy(update={"argv": list(handler[1:])})
    try:
        tmpl = _ENV.from_string(template)
        return tmpl.render(**_template_context(alert))
    except jinja2.TemplateSyntaxError as e:
        logger.error(f"Template parsing failed for \"{template}\" with error: {e}")
        raise TemplateRenderError(template, e) from e
    except Exception as e:
        logger.error(f"Template execution failed for \"{template}\" with error: {e}")
        raise TemplateRenderError(template, e) from e


def build_command(handler: list[str], template: str, alert: Alert) -> tuple[str, list[str]]:
    """Render and tokenize a handler command into an executable and its arguments.

    Raises:
        TemplateRenderError: If rendering fails.
        UnterminatedQuoteError: If the rendered command has an unclosed quote.
        EmptyCommandError: If the rendered command holds no tokens.
    """
    fields = tokenize(render_command(handler, template, alert))
    if not fields:
        raise EmptyCommandError()
    return fields[0], fields[1:]
