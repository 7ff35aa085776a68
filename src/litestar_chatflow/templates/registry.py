"""Template registry for workflow templates.

Templates are keyed by a stable identifier (usually a
:class:`~litestar_chatflow.core.types.TemplateKey`). Selection by display name goes
through :meth:`TemplateRegistry.resolve_name`, which tolerates casing, extra words
and small typos.
"""

from __future__ import annotations

import difflib
import re
from typing import TYPE_CHECKING

from litestar_chatflow.exceptions import TemplateNotFoundError, TemplateValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from litestar_chatflow.core.definition import WorkflowTemplate

__all__ = ["TemplateRegistry", "normalize_name"]

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_name(value: str) -> str:
    """Lower-case a name and collapse punctuation and underscores to single spaces.

    Example:
        >>> normalize_name("  Press_Release!! ")
        'press release'
    """
    return _NON_ALNUM.sub(" ", value.casefold()).strip()


class TemplateRegistry:
    """Registry for storing and looking up workflow templates.

    Attributes:
        fuzzy_cutoff: Minimum similarity ratio accepted by fuzzy name matching.
    """

    def __init__(self, templates: Iterable[WorkflowTemplate] = (), fuzzy_cutoff: float = 0.75) -> None:
        """Initialize the registry.

        Args:
            templates: Templates to register immediately.
            fuzzy_cutoff: Minimum similarity ratio accepted by fuzzy name matching.
        """
        self._templates: dict[str, WorkflowTemplate] = {}
        self.fuzzy_cutoff = fuzzy_cutoff
        for template in templates:
            self.register(template)

    @classmethod
    def with_builtin_templates(cls) -> TemplateRegistry:
        """Create a registry holding every built-in template."""
        from litestar_chatflow.templates.builtin import BUILTIN_TEMPLATES

        return cls(BUILTIN_TEMPLATES)

    def register(self, template: WorkflowTemplate) -> None:
        """Register a template, replacing any template with the same key.

        Args:
            template: The template to register.

        Raises:
            TemplateValidationError: If the template fails validation.
        """
        errors = template.validate()
        if errors:
            raise TemplateValidationError(template.key, errors)
        self._templates[str(template.key)] = template

    def unregister(self, key: str) -> None:
        """Remove a template. Unknown keys are ignored."""
        self._templates.pop(str(key), None)

    def get(self, key: str) -> WorkflowTemplate:
        """Get a template by key.

        Args:
            key: The template key.

        Returns:
            The registered template.

        Raises:
            TemplateNotFoundError: If no template is registered under ``key``.
        """
        try:
            return self._templates[str(key)]
        except KeyError:
            raise TemplateNotFoundError(str(key)) from None

    def has_template(self, key: str) -> bool:
        return str(key) in self._templates

    def list_templates(self, *, include_selection: bool = True) -> list[WorkflowTemplate]:
        """List registered templates in registration order.

        Args:
            include_selection: Whether to include selection templates.

        Returns:
            List of templates.
        """
        return [t for t in self._templates.values() if include_selection or not t.is_selection]

    def resolve_name(self, name: str | None) -> WorkflowTemplate | None:
        """Resolve a free-form workflow name to a selectable template.

        Matching is attempted in order: template key, exact name, normalized name,
        substring containment (longest name wins), then fuzzy similarity. Selection
        templates are never returned.

        Args:
            name: The name to resolve, for example an LLM-reported selection.

        Returns:
            The matching template or None.

        Example:
            >>> registry.resolve_name("press-release").name
            'Press Release'
            >>> registry.resolve_name("Socail Post").name
            'Social Post'
        """
        if not name or not name.strip():
            return None

        candidates = self.list_templates(include_selection=False)
        wanted = normalize_name(name)
        if not wanted:
            return None

        for template in candidates:
            if name == template.key or name == template.name:
                return template

        by_normalized = {normalize_name(t.name): t for t in candidates}
        by_normalized.update({normalize_name(str(t.key)): t for t in candidates})
        if wanted in by_normalized:
            return by_normalized[wanted]

        contained = [
            (len(normalized), template)
            for normalized, template in by_normalized.items()
            if f" {normalized} " in f" {wanted} "
        ]
        if contained:
            return max(contained, key=lambda item: item[0])[1]

        # a partial name is only accepted when it is unambiguous
        containing = {
            template.key for normalized, template in by_normalized.items() if f" {wanted} " in f" {normalized} "
        }
        if len(containing) == 1:
            return self.get(containing.pop())

        close = difflib.get_close_matches(wanted, list(by_normalized), n=1, cutoff=self.fuzzy_cutoff)
        if close:
            return by_normalized[close[0]]
        return None

    def __contains__(self, key: object) -> bool:
        return str(key) in self._templates

    def __len__(self) -> int:
        return len(self._templates)
