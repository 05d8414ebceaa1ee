"""
VNml error taxonomy.

Lookups that miss are not errors: they return ``None`` or ``False``.
"""


class FormatError(ValueError):
    """A VNml document is malformed and cannot be loaded."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class ConversionError(ValueError):
    """A setting value cannot be converted to or from its text form."""

    def __init__(self, setting_name: str, message: str) -> None:
        self.setting_name = setting_name
        super().__init__(f"{setting_name}: {message}")
