"""Locale message catalogs used to localize audit strings."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from importlib.resources import files
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import TypeAdapter

if TYPE_CHECKING:
    from importlib.resources.abc import Traversable

LOGGER = logging.getLogger(__name__)

DEFAULT_LOCALE = "en-US"

_PLACEHOLDER_PATTERN = re.compile(r"\{(\w+)\}")
LOCALE_PATTERN = r"^[A-Za-z]{2,3}(-[A-Za-z0-9]{2,8})*$"
_LOCALE_TAG = re.compile(LOCALE_PATTERN)
_LOCALE_FILE_ADAPTER = TypeAdapter(dict[str, str])


class MessageCatalog(Protocol):
    """Resolves a template id plus parameters into a localized string."""

    locale: str

    def lookup(self, template_id: str, params: Mapping[str, Any] | None = None) -> str:
        ...


def message_id(namespace: str, key: str) -> str:
    return f"{namespace} | {key}"


def render_template(template: str, params: Mapping[str, Any]) -> str:
    """Substitute `{name}` placeholders with the matching parameter values."""

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in params:
            raise KeyError(f"Missing message parameter: {name}")
        return str(params[name])

    return _PLACEHOLDER_PATTERN.sub(_replace, template)


class LocaleCatalog:
    """Catalog backed by one locale's messages with English defaults behind it."""

    def __init__(
        self,
        locale: str,
        messages: Mapping[str, str],
        fallback: Mapping[str, str],
    ) -> None:
        self.locale = locale
        self._messages = dict(messages)
        self._fallback = dict(fallback)

    def lookup(self, template_id: str, params: Mapping[str, Any] | None = None) -> str:
        template = self._messages.get(template_id)
        if template is None:
            template = self._fallback.get(template_id)
        if template is None:
            raise KeyError(f"Unknown message template: {template_id}")
        return render_template(template, params or {})


def validate_locale(locale: str) -> str:
    """Return `locale` unchanged if it is a BCP 47 shaped tag, else raise `ValueError`."""
    if not _LOCALE_TAG.fullmatch(locale):
        raise ValueError(f"Invalid locale: {locale!r}")
    return locale


def resolve_locale(locale: str | None, *, locales_dir: Path | None = None) -> str:
    """Return the locale whose messages will be used for `locale`."""
    requested = validate_locale(locale or DEFAULT_LOCALE)
    for candidate in _candidate_locales(requested):
        if _locale_file(candidate, locales_dir) is not None:
            return candidate
    return DEFAULT_LOCALE


def load_catalog(
    locale: str | None,
    defaults: Mapping[str, str],
    *,
    locales_dir: Path | None = None,
) -> LocaleCatalog:
    """Build a catalog for `locale`, falling back from `es-ES` to `es` to defaults."""
    requested = locale or DEFAULT_LOCALE
    resolved = resolve_locale(requested, locales_dir=locales_dir)
    if resolved != requested:
        LOGGER.debug("Locale %s resolved to %s.", requested, resolved)

    source = _locale_file(resolved, locales_dir)
    messages: dict[str, str] = {}
    if source is not None:
        messages = _LOCALE_FILE_ADAPTER.validate_python(
            json.loads(source.read_text(encoding="utf-8"))
        )
    return LocaleCatalog(resolved, messages, defaults)


def available_locales(locales_dir: Path | None = None) -> list[str]:
    names = {
        entry.name[: -len(".json")]
        for entry in files("perf_audit").joinpath("locales").iterdir()
        if entry.name.endswith(".json")
    }
    if locales_dir is not None and locales_dir.is_dir():
        names.update(path.stem for path in locales_dir.glob("*.json"))
    return sorted(names)


def _candidate_locales(locale: str) -> list[str]:
    candidates = [locale]
    language = locale.split("-", 1)[0]
    if language != locale:
        candidates.append(language)
    return candidates


def _locale_file(locale: str, locales_dir: Path | None) -> Traversable | None:
    filename = f"{locale}.json"
    if locales_dir is not None:
        path = locales_dir / filename
        if path.is_file():
            return path

    resource = files("perf_audit").joinpath("locales").joinpath(filename)
    if resource.is_file():
        return resource
    return None
