"""
Edit use cases — add, edit and delete tools inside a session.

Each successful edit is staged: the store goes dirty, the commit message
is queued for the next sync and the working copy is saved locally.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.core.context import SessionContext
from src.core.models.catalog import CatalogError
from src.core.models.tool import ToolRecord
from src.core.services.tool_form import (
    FormError,
    PendingDelete,
    ToolForm,
    confirm_delete,
    stage_delete,
    submit,
)


@dataclass
class EditResult:
    ok: bool = False
    record: ToolRecord | None = None
    group: str = ""
    message: str = ""
    error: str | None = None
    field_errors: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "tool": self.record.to_document() if self.record else None,
            "group": self.group,
            "message": self.message,
            "error": self.error,
            "field_errors": self.field_errors,
        }


def save_tool(
    ctx: SessionContext,
    form: ToolForm,
    group: str | None = None,
    tool_id: str | None = None,
) -> EditResult:
    """Add a tool (no ``tool_id``) or update one, then stage the change."""
    result = EditResult()
    with ctx.lock:
        try:
            submitted = submit(ctx.store, form, group=group, tool_id=tool_id)
        except FormError as e:
            result.error = str(e)
            result.field_errors = e.errors
            return result
        except CatalogError as e:
            result.error = str(e)
            return result

        ctx.stage(submitted.message)

    result.ok = True
    result.record = submitted.record
    result.group = submitted.group
    result.message = submitted.message
    return result


def request_delete(ctx: SessionContext, group: str, tool_id: str) -> PendingDelete | None:
    """First step of a delete; None when the tool does not exist."""
    try:
        return stage_delete(ctx.store, group, tool_id)
    except CatalogError:
        return None


def delete_tool(ctx: SessionContext, pending: PendingDelete) -> EditResult:
    """Second step of a delete: remove and stage."""
    result = EditResult(group=pending.group)
    with ctx.lock:
        try:
            message = confirm_delete(ctx.store, pending)
        except CatalogError as e:
            result.error = str(e)
            return result
        ctx.stage(message)

    result.ok = True
    result.message = message
    return result
