"""Exceptions raised by text box construction and rendering."""


class TextBoxError(Exception):
    """Base class for all text box errors."""


class ConfigurationError(TextBoxError, ValueError):
    """A box option has an invalid value."""


class UnknownOption(ConfigurationError):
    """One or more option keys are not recognised."""

    def __init__(self, keys: list[str]) -> None:
        self.keys = sorted(keys)
        super().__init__(f"Unknown text box option(s): {', '.join(self.keys)}")


class BadFontFamily(TextBoxError):
    """No font family is registered for the font a style needs."""

    def __init__(self, font_name: str, styles: tuple[str, ...] = ()) -> None:
        self.font_name = font_name
        self.styles = styles
        wanted = "/".join(styles) if styles else "normal"
        super().__init__(f"Bad font family: no {wanted} face registered for '{font_name}'")


class CannotFit(TextBoxError):
    """The box is not wide enough to print a single glyph."""
