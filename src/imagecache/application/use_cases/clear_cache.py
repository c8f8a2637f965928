"""Operator entry points for clearing the image cache."""

from collections.abc import Container
from typing import final

from imagecache.application.ports.outbound.cache import CacheStore
from imagecache.application.validation import validate_filename, validate_template_name
from imagecache.domain.entities.cache import AllTemplates, FilenameScope, TemplateScope


@final
class CacheMaintenance:
    """Clear cached artifacts by template, by source filename, or entirely.

    Each method returns the number of directories (template scopes) or files
    (filename scope) removed.
    """

    def __init__(self, store: CacheStore, templates: Container[str] | None = None):
        self.store = store
        self.templates = templates

    def clear_all(self) -> int:
        return self.store.invalidate(AllTemplates())

    def clear_template(self, template: str) -> int:
        validate_template_name(template, self.templates)
        return self.store.invalidate(TemplateScope(name=template))

    def clear_filename(self, filename: str) -> int:
        validate_filename(filename)
        return self.store.invalidate(FilenameScope(name=filename))
