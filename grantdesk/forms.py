"""Per-category form capabilities.

Forms are supplied from outside the core. Each one is a callable taking the
record being edited (None when creating) and three callbacks::

    renderer(record, on_save, on_cancel, on_upload) -> rendered form
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from .models import Record, UploadContent, UploadResult
from .sections import SectionId, describe

OnSave = Callable[[Mapping[str, Any]], Awaitable[bool]]
OnCancel = Callable[[], Any]
OnUpload = Callable[[UploadContent], Awaitable[UploadResult]]
FormRenderer = Callable[[Optional[Record], OnSave, OnCancel, OnUpload], Any]


class FormRegistry:
    def __init__(self, default: Optional[FormRenderer] = None):
        self._renderers: Dict[SectionId, FormRenderer] = {}
        self._default = default

    def register(self, section_id: Union[SectionId, str], renderer: FormRenderer) -> None:
        self._renderers[SectionId(section_id)] = renderer

    def renderer_for(self, section_id: Union[SectionId, str]) -> FormRenderer:
        key = SectionId(section_id)
        renderer = self._renderers.get(key, self._default)
        if renderer is None:
            raise KeyError(f"No form registered for section {key.value!r}")
        return renderer


def dialog_title(item_label: str, editing: bool) -> str:
    return f"{'Edit' if editing else 'Create New'} {item_label}"


def describe_form(section_id: SectionId) -> FormRenderer:
    """Renderer that describes the dialog as JSON instead of drawing it.

    Used by the console API; the browser builds the actual fields.
    """
    descriptor = describe(section_id)

    def _render(record: Optional[Record], on_save: OnSave, on_cancel: OnCancel, on_upload: OnUpload) -> Dict[str, Any]:
        return {
            "section": descriptor.id.value,
            "title": dialog_title(descriptor.item_label, record is not None),
            "record": record.to_dict() if record else None,
        }

    return _render


def console_forms() -> FormRegistry:
    registry = FormRegistry()
    for section_id in SectionId:
        registry.register(section_id, describe_form(section_id))
    return registry
