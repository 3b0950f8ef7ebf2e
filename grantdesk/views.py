from typing import Any, Dict, List, Optional

from .forms import dialog_title as _dialog_title
from .models import EditSession, Record, RecordSet
from .sections import SectionDescriptor

EMPTY_MESSAGE = 'No records found. Click "Add New" to create one.'
LOADING_MESSAGE = "Loading..."
PLACEHOLDER = "-"


def display_row(record: Record, descriptor: SectionDescriptor) -> Dict[str, Any]:
    cells = [record.get(name) or PLACEHOLDER for name in descriptor.display_fields]
    return {"id": record.id, "cells": cells}


def table_view(record_set: RecordSet, descriptor: SectionDescriptor) -> Dict[str, Any]:
    """Build the list view for the active section.

    Status is one of loading, error, empty or ready; an empty list is not
    an error.
    """
    rows: List[Dict[str, Any]] = []
    if record_set.is_loading:
        status, message = "loading", LOADING_MESSAGE
    elif record_set.last_error is not None:
        status, message = "error", record_set.last_error.message
    elif not record_set.records:
        status, message = "empty", EMPTY_MESSAGE
    else:
        status, message = "ready", None
        rows = [display_row(r, descriptor) for r in record_set.records]

    return {
        "section": descriptor.id.value,
        "title": descriptor.title,
        "description": descriptor.description,
        "columns": list(descriptor.display_fields),
        "rows": rows,
        "status": status,
        "message": message,
    }


def dialog_title(session: EditSession, descriptor: SectionDescriptor) -> Optional[str]:
    if not session.is_open:
        return None
    return _dialog_title(descriptor.item_label, session.target is not None)


def session_view(session: EditSession) -> Dict[str, Any]:
    return {
        "mode": session.mode.value,
        "target": session.target.to_dict() if session.target else None,
    }
