"""
Form field components.

Every field renders through `FormField`, which owns the label, help and error
markup so all portal forms share one accessible structure.
"""

from typing import Iterable, Mapping, Optional, Sequence

from ..base import Component


class FormField(Component):
    """Wrapper that renders label, input slot, help, and error text."""

    def __init__(
        self,
        field_id: str,
        label: str,
        *,
        required: bool = False,
        help_text: Optional[str] = None,
        error_text: Optional[str] = None,
        name: Optional[str] = None,
    ) -> None:
        self.field_id = field_id
        # Several forms on one page may share a field name but need unique ids.
        self.name = name or field_id
        self.label = label
        self.required = required
        self.help_text = help_text
        self.error_text = error_text

    def _aria(self) -> dict:
        return {
            "aria_describedby": f"{self.field_id}-help" if self.help_text else None,
            "aria_invalid": "true" if self.error_text else "false",
            "required": self.required,
        }

    def wrap(self, input_html: str) -> str:
        marker = '<span class="form-required" aria-hidden="true">*</span>' if self.required else ""
        help_html = (
            f'<p class="form-help" id="{self.field_id}-help">{self.escape(self.help_text)}</p>'
            if self.help_text
            else ""
        )
        error_html = (
            f'<p class="form-error" role="alert" id="{self.field_id}-error">{self.escape(self.error_text)}</p>'
            if self.error_text
            else ""
        )
        css = self.classes("form-field", **{"form-field--error": bool(self.error_text)})
        label_attrs = self.attributes(for_=self.field_id, class_="form-label")
        return (
            f'<div class="{css}">'
            f"<label {label_attrs}>{self.escape(self.label)}{marker}</label>"
            f"{input_html}{help_html}{error_html}"
            "</div>"
        )


class TextInputField(FormField):
    """Single-line input (text, email, password, tel, date)."""

    def render(
        self,
        *,
        value: str = "",
        input_type: str = "text",
        autocomplete: Optional[str] = None,
        placeholder: Optional[str] = None,
    ) -> str:
        attrs = self.attributes(
            id=self.field_id,
            name=self.name,
            type=input_type,
            class_="form-input",
            # Never echo passwords back into the page.
            value=None if input_type == "password" else value,
            autocomplete=autocomplete,
            placeholder=placeholder,
            **self._aria(),
        )
        return self.wrap(f"<input {attrs}>")


class TextAreaField(FormField):
    def render(self, value: str = "", rows: int = 5) -> str:
        attrs = self.attributes(
            id=self.field_id,
            name=self.name,
            rows=str(rows),
            class_="form-input",
            **self._aria(),
        )
        return self.wrap(f"<textarea {attrs}>{self.escape(value)}</textarea>")


class SelectField(FormField):
    """Dropdown built from a list of option values; `labels` overrides the shown text."""

    def render(
        self,
        options: Sequence[str],
        value: str = "",
        *,
        placeholder: str = "Select...",
        labels: Optional[Mapping[str, str]] = None,
    ) -> str:
        attrs = self.attributes(id=self.field_id, name=self.name, class_="form-input", **self._aria())
        opts = [f'<option value="">{self.escape(placeholder)}</option>']
        for option in options:
            selected = " selected" if option == value else ""
            text = (labels or {}).get(option, option)
            opts.append(f'<option value="{self.escape(option)}"{selected}>{self.escape(text)}</option>')
        return self.wrap(f"<select {attrs}>{''.join(opts)}</select>")


class CheckboxGroupField(FormField):
    """Multi-select rendered as checkboxes sharing one name."""

    def render(self, options: Sequence[str], selected: Iterable[str] = ()) -> str:
        chosen = set(selected)
        boxes = []
        for idx, option in enumerate(options):
            box_id = f"{self.field_id}-{idx}"
            checked = " checked" if option in chosen else ""
            boxes.append(
                f'<label class="checkbox" for="{box_id}">'
                f'<input type="checkbox" id="{box_id}" name="{self.name}" value="{self.escape(option)}"{checked}> '
                f"{self.escape(option)}</label>"
            )
        return self.wrap(f'<div class="checkbox-group" id="{self.field_id}">{"".join(boxes)}</div>')


class FileUploadField(FormField):
    """File upload control with consistent styling."""

    def render(self, accept: Optional[str] = None) -> str:
        attrs = self.attributes(
            id=self.field_id,
            name=self.name,
            type="file",
            accept=accept,
            **self._aria(),
        )
        return self.wrap(f"<input {attrs}>")
