"""Template rendering — the synchronous render capability units call into.

The pipeline only needs ``render(template, context) -> str``.  The default
implementation renders Kida templates from the site's template directories.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

from mews._errors import ExportError


class TemplateRenderer(Protocol):
    """Renders a named template with a context mapping."""

    def render(self, template: str, context: Mapping[str, Any]) -> str: ...


class KidaRenderer:
    """Render templates with a Kida environment.

    The environment is created on first use so importing mews does not
    import Kida.

    Args:
        template_dirs: Directories searched in order for templates.
        autoescape: Escape HTML in interpolated values.

    """

    __slots__ = ("_autoescape", "_env", "_template_dirs")

    def __init__(self, template_dirs: Sequence[Path], *, autoescape: bool = True) -> None:
        self._template_dirs = [Path(d) for d in template_dirs]
        self._autoescape = autoescape
        self._env: Any = None

    @property
    def env(self) -> Any:
        """The underlying Kida ``Environment``."""
        if self._env is None:
            from kida import Environment, FileSystemLoader

            self._env = Environment(
                loader=FileSystemLoader([str(d) for d in self._template_dirs]),
                autoescape=self._autoescape,
            )
        return self._env

    def render(self, template: str, context: Mapping[str, Any]) -> str:
        """Render *template* with *context*.

        Raises:
            ExportError: If the template cannot be loaded or rendered.

        """
        try:
            return self.env.get_template(template).render(**context)
        except Exception as exc:
            msg = f"Failed to render template {template!r}: {exc}"
            raise ExportError(msg) from exc
