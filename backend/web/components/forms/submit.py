"""Submit button component."""

from typing import Optional

from ..base import Component


class SubmitButton(Component):
    """Form action button; `variant` maps to the btn-* CSS modifier."""

    def __init__(
        self,
        label: str,
        *,
        variant: str = "primary",
        disabled: bool = False,
        data_action: Optional[str] = None,
        name: Optional[str] = None,
        value: Optional[str] = None,
    ) -> None:
        self.label = label
        self.variant = variant
        self.disabled = disabled
        self.data_action = data_action
        self.name = name
        self.value = value

    def render(self) -> str:
        attrs = self.attributes(
            type="submit",
            class_=f"btn btn-{self.variant}",
            disabled=self.disabled,
            data_action=self.data_action,
            name=self.name,
            value=self.value,
        )
        return f"<button {attrs}>{self.escape(self.label)}</button>"
