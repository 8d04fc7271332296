from __future__ import annotations

from typing import Optional


class PipelineError(Exception):
    """Fatal pipeline condition; no output is produced."""

    code = "pipeline_error"

    def to_detail(self) -> dict:
        return {"error": self.code, "message": str(self)}


class EmptyInput(PipelineError):
    code = "empty_input"

    def __init__(self, message: str = "No usable data rows in input"):
        super().__init__(message)


class UnrecognizedHeader(PipelineError):
    code = "unrecognized_header"

    def __init__(self, message: str = "No supported KPI column found in header"):
        super().__init__(message)


class MalformedRow(PipelineError):
    code = "malformed_row"

    def __init__(self, row: int, value: Optional[str] = None):
        self.row = row
        self.value = value
        super().__init__(f"Row {row}: cannot parse date {value!r}")


class UnsupportedFormat(PipelineError):
    code = "unsupported_format"

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f"Unsupported output format {extension!r} (expected .png or .svg)")


class UnplottableValues(PipelineError):
    code = "unplottable_values"

    def __init__(self, message: str = "Series values exceed the plottable float range"):
        super().__init__(message)
