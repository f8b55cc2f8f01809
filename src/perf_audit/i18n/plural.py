"""Plural category selection and pluralized message formatting."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from perf_audit.i18n.catalog import MessageCatalog


class PluralCategory(str, Enum):
    """Cardinality buckets a pluralized message can branch on."""

    ONE = "one"
    OTHER = "other"


# Exact-match rules; every count not listed here falls into OTHER.
_EXACT_MATCH_RULES: dict[int, PluralCategory] = {1: PluralCategory.ONE}


def select_plural_category(count: int) -> PluralCategory:
    if count < 0:
        raise ValueError(f"Plural count must be non-negative, got {count}")
    return _EXACT_MATCH_RULES.get(count, PluralCategory.OTHER)


class PluralMessage(BaseModel):
    """Rule table mapping plural categories to default (English) templates.

    Each branch is published to the catalog under its own template id,
    `<template_id>.<category>`, so a locale can rephrase any branch without
    touching category selection.
    """

    model_config = ConfigDict(frozen=True)

    template_id: str
    branches: dict[PluralCategory, str]
    count_param: str = "count"

    @model_validator(mode="after")
    def _require_other_branch(self) -> "PluralMessage":
        if PluralCategory.OTHER not in self.branches:
            raise ValueError(f"{self.template_id}: an 'other' branch is required")
        return self

    def branch_id(self, category: PluralCategory) -> str:
        return f"{self.template_id}.{category.value}"

    def defaults(self) -> dict[str, str]:
        return {self.branch_id(category): text for category, text in self.branches.items()}


def format_plural(
    catalog: MessageCatalog,
    message: PluralMessage,
    count: int,
    **params: Any,
) -> str:
    """Select the branch for `count` and resolve it through `catalog`."""
    category = select_plural_category(count)
    if category not in message.branches:
        category = PluralCategory.OTHER
    return catalog.lookup(
        message.branch_id(category),
        {**params, message.count_param: count},
    )
