"""
Base Component Class for SkillMount UI Components

All pages are rendered server-side from small Python components. Plain
f-strings plus explicit escaping keep the markup easy to test without a
template engine.
"""

from typing import Any, Optional
import html


class Component:
    """Base class for all UI components

    Subclasses implement `render()` and return an HTML string. Every piece of
    user-provided text must pass through `escape()`.
    """

    def render(self) -> str:
        """Render the component as an HTML string"""
        raise NotImplementedError("Subclasses must implement render()")

    def __str__(self) -> str:
        return self.render()

    @staticmethod
    def escape(text: Optional[Any]) -> str:
        """Escape HTML entities; None becomes an empty string."""
        return html.escape(str(text)) if text is not None else ""

    @staticmethod
    def classes(*args: str, **conditionals: bool) -> str:
        """Build CSS class strings with conditional classes

        Example:
            >>> Component.classes("btn", "btn-primary", disabled=True, active=False)
            "btn btn-primary disabled"
        """
        classes = list(args)
        classes.extend(key for key, value in conditionals.items() if value)
        return " ".join(classes)

    @staticmethod
    def attributes(**attrs: Any) -> str:
        """Build HTML attributes from keyword arguments

        Example:
            >>> Component.attributes(id="test", data_value="123", disabled=True)
            'id="test" data-value="123" disabled'
        """
        result = []
        for key, value in attrs.items():
            # Trailing underscore for reserved names: class_ -> class, for_ -> for
            if key.endswith("_"):
                key = key[:-1]
            else:
                key = key.replace("_", "-")

            if value is True:
                result.append(key)
            elif value is not False and value is not None:
                result.append(f'{key}="{html.escape(str(value))}"')

        return " ".join(result)
