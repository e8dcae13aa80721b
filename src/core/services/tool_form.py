"""
Tool form — validate one add/edit, stage it into the store.

The same form backs the admin page, the JSON API and the CLI. It accepts
free text the way a person types it (comma-separated features, blank
optional fields) and produces a clean ToolRecord, or a FormError listing
what is wrong with each field.

Deletion is two-step: ``stage_delete`` names the record, and only
``confirm_delete`` removes it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from src.core.models.tool import (
    CATEGORY_GROUPS,
    DEFAULT_ICON_CLASS,
    GROUPS,
    PLATFORM_GROUPS,
    PRICING_TIERS,
    ToolRecord,
    is_web_url,
)
from src.core.services.catalog_store import CatalogStore

logger = logging.getLogger(__name__)


class FormError(Exception):
    """Raised when a submitted tool fails validation."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        summary = "; ".join(f"{k}: {v}" for k, v in errors.items())
        super().__init__(f"Invalid tool: {summary}")


def parse_features(value: str | Iterable[str] | None) -> list[str]:
    """Split comma-separated text into trimmed, non-empty tags."""
    if value is None:
        return []
    parts = value.split(",") if isinstance(value, str) else list(value)
    return [p.strip() for p in parts if p and p.strip()]


def _first(data: Mapping[str, Any], *keys: str, default: Any = "") -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass
class ToolForm:
    """Raw field values, as typed."""

    name: str = ""
    description_en: str = ""
    description_ar: str = ""
    url: str = ""
    group: str = "online"
    category: str = ""
    pricing: str = ""
    badge: str = ""
    icon_class: str = ""
    icon_gradient: str = ""
    features_en: str = ""
    features_ar: str = ""
    platforms: list[str] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], group: str | None = None) -> ToolForm:
        """Build from an HTML form (MultiDict) or a JSON body.

        Both snake_case and the document's camelCase keys are accepted.
        """
        if hasattr(data, "getlist"):
            platforms = data.getlist("platforms")
        else:
            platforms = data.get("platforms") or []
        if isinstance(platforms, str):
            platforms = parse_features(platforms)

        features_en = _first(data, "features_en", "featuresEn")
        features_ar = _first(data, "features_ar", "featuresAr")

        return cls(
            name=str(_first(data, "name")).strip(),
            description_en=str(_first(data, "description_en", "descriptionEn")).strip(),
            description_ar=str(_first(data, "description_ar", "descriptionAr")).strip(),
            url=str(_first(data, "url")).strip(),
            group=str(_first(data, "group", "section", default=group or "online")).strip(),
            category=str(_first(data, "category")).strip(),
            pricing=str(_first(data, "pricing")).strip(),
            badge=str(_first(data, "badge")).strip(),
            icon_class=str(_first(data, "icon_class", "iconClass")).strip(),
            icon_gradient=str(_first(data, "icon_gradient", "iconGradient")).strip(),
            features_en=", ".join(parse_features(features_en)),
            features_ar=", ".join(parse_features(features_ar)),
            platforms=[str(p).strip() for p in platforms if str(p).strip()],
        )

    @classmethod
    def from_record(cls, record: ToolRecord, group: str) -> ToolForm:
        """Pre-fill the form for editing an existing record."""
        return cls(
            name=record.name,
            description_en=record.description_en,
            description_ar=record.description_ar,
            url=record.url,
            group=group,
            category=record.category or "",
            pricing=record.pricing,
            badge=record.badge or "",
            icon_class=record.icon_class,
            icon_gradient=record.icon_gradient or "",
            features_en=", ".join(record.features_en),
            features_ar=", ".join(record.features_ar),
            platforms=list(record.platforms or []),
        )

    def validate(self) -> dict[str, str]:
        """Field → message for every problem found (empty when valid)."""
        errors: dict[str, str] = {}
        if not self.name:
            errors["name"] = "Name is required"
        if not self.description_en and not self.description_ar:
            errors["description"] = "At least one description (English or Arabic) is required"
        if not self.url:
            errors["url"] = "URL is required"
        elif not is_web_url(self.url):
            errors["url"] = "URL must start with http:// or https://"
        if not self.pricing:
            errors["pricing"] = "Pricing is required"
        elif self.pricing not in PRICING_TIERS:
            errors["pricing"] = f"Pricing must be one of: {', '.join(PRICING_TIERS)}"
        if self.group not in GROUPS:
            errors["group"] = f"Section must be one of: {', '.join(GROUPS)}"
        return errors

    def to_record(self) -> ToolRecord:
        """Validated record (without a meaningful id yet).

        Raises:
            FormError: when any field is invalid.
        """
        errors = self.validate()
        if errors:
            raise FormError(errors)

        return ToolRecord(
            name=self.name,
            description_en=self.description_en,
            description_ar=self.description_ar,
            url=self.url,
            category=(self.category or None) if self.group in CATEGORY_GROUPS else None,
            pricing=self.pricing,
            badge=self.badge or None,
            icon_class=self.icon_class or DEFAULT_ICON_CLASS,
            icon_gradient=self.icon_gradient or None,
            features_en=parse_features(self.features_en),
            features_ar=parse_features(self.features_ar),
            platforms=(self.platforms or None) if self.group in PLATFORM_GROUPS else None,
        )


@dataclass
class SubmitResult:
    """What a successful submit did."""

    record: ToolRecord
    group: str
    message: str           # commit message for the next sync
    moved_from: str | None = None


def submit(
    store: CatalogStore,
    form: ToolForm,
    group: str | None = None,
    tool_id: str | None = None,
) -> SubmitResult:
    """Add (no ``tool_id``) or update a record from a form.

    For an update, ``group`` is where the record currently lives and
    ``form.group`` is where it should end up.
    """
    record = form.to_record()

    if tool_id is None:
        saved = store.add(form.group, record)
        logger.info("Staged new tool '%s' in %s", saved.name, form.group)
        return SubmitResult(record=saved, group=form.group, message=f"Add new tool: {saved.name}")

    current = group or form.group
    saved = store.update(current, tool_id, record, target_group=form.group)
    logger.info("Staged update of '%s'", saved.name)
    return SubmitResult(
        record=saved,
        group=form.group,
        message=f"Update tool: {saved.name}",
        moved_from=current if current != form.group else None,
    )


@dataclass
class PendingDelete:
    """A delete waiting for confirmation."""

    group: str
    tool_id: str
    name: str


def stage_delete(store: CatalogStore, group: str, tool_id: str) -> PendingDelete:
    """First step: resolve the record so the user can be shown its name."""
    found_group, record = store.find(tool_id)
    if found_group != group:
        logger.debug("Tool %s lives in %s, not %s", tool_id, found_group, group)
    return PendingDelete(group=found_group, tool_id=tool_id, name=record.name)


def confirm_delete(store: CatalogStore, pending: PendingDelete) -> str:
    """Second step: remove the record. Returns the commit message."""
    removed = store.remove(pending.group, pending.tool_id)
    logger.info("Staged deletion of '%s'", removed.name)
    return f"Delete tool: {removed.name}"
