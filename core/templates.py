"""Compilation of the operator-supplied naming templates.

Templates are compiled once when the config is loaded. The result is an
immutable ``CompiledTemplates`` value that the formatters in ``core.naming``
render against on every event.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import jinja2
from jinja2.sandbox import SandboxedEnvironment

from core.errors import TemplateError

logger = logging.getLogger("DiscordBridge.Templates")

DEFAULT_USERNAME_TEMPLATE = "discord_{{ userid }}"
DEFAULT_DISPLAYNAME_TEMPLATE = "{{ username }}#{{ discriminator }} (D){% if bot %} (bot){% endif %}"
DEFAULT_CHANNELNAME_TEMPLATE = (
    "{% if guild %}{{ guild }} - {% endif %}{% if folder %}{{ folder }} - {% endif %}{{ name }} (D)"
)

USERID_PROBE = "1234567890"

_environment = SandboxedEnvironment(autoescape=False)


@dataclass(frozen=True)
class CompiledTemplates:
    username_source: str
    displayname_source: str
    channelname_source: str
    username: jinja2.Template
    displayname: jinja2.Template
    channelname: jinja2.Template


def render_template(template: jinja2.Template, context: dict[str, Any]) -> str:
    """Render a compiled template, returning an empty string if rendering fails.

    A broken name should never block an event, so errors are logged and
    swallowed here instead of propagating to the relay.
    """

    try:
        return template.render(context)
    except Exception as exc:
        logger.warning(f"Failed to render {template.name} template: {exc}")
        return ""


def _compile(name: str, source: str) -> jinja2.Template:
    try:
        template = _environment.from_string(source)
    except jinja2.TemplateSyntaxError as exc:
        raise TemplateError(f"{name} template: {exc}") from exc
    template.name = name
    return template


def compile_templates(username: str, displayname: str, channelname: str) -> CompiledTemplates:
    """Compile and check the three naming templates. Raises TemplateError."""

    username_template = _compile("username", username)
    # The user ID is the only thing keeping puppet usernames unique.
    if USERID_PROBE not in render_template(username_template, {"userid": USERID_PROBE}):
        raise TemplateError("username template is missing user ID placeholder")

    displayname_template = _compile("displayname", displayname)
    channelname_template = _compile("channelname", channelname)

    return CompiledTemplates(
        username_source=username,
        displayname_source=displayname,
        channelname_source=channelname,
        username=username_template,
        displayname=displayname_template,
        channelname=channelname_template,
    )
