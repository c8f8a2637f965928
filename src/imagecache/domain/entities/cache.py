"""Invalidation scopes for the cache tree."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AllTemplates:
    """Every per-template directory."""


@dataclass(frozen=True)
class TemplateScope:
    name: str


@dataclass(frozen=True)
class FilenameScope:
    """Every artifact derived from one source filename, across templates."""

    name: str


InvalidationScope = AllTemplates | TemplateScope | FilenameScope
