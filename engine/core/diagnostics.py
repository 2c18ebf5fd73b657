"""
Generation diagnostics and errors.
"""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel

class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    """
    A problem found while generating, attributed to one declaration.

    Attributes:
        severity: ERROR drops the declaration (or the batch), WARNING is informational
        message: Human readable description
        declaration: Declared name the diagnostic belongs to
        source: Originating source unit of the declaration
    """
    severity: Severity
    message: str
    declaration: Optional[str] = None
    source: Optional[str] = None

    @classmethod
    def error(cls, message: str, declaration: Optional[str] = None, source: Optional[str] = None) -> "Diagnostic":
        return cls(severity=Severity.ERROR, message=message, declaration=declaration, source=source)

    @classmethod
    def warning(cls, message: str, declaration: Optional[str] = None, source: Optional[str] = None) -> "Diagnostic":
        return cls(severity=Severity.WARNING, message=message, declaration=declaration, source=source)

    def __str__(self) -> str:
        where = f"{self.declaration}: " if self.declaration else ""
        return f"[{self.severity.value}] {where}{self.message}"


class GenerationError(Exception):
    """Base error of the generator."""


class NamingCollisionError(GenerationError):
    """Two or more features resolve to the same generated name; the batch is not emitted."""

    def __init__(self, diagnostics: List[Diagnostic]):
        self.diagnostics = diagnostics
        summary = "; ".join(d.message for d in diagnostics)
        super().__init__(f"Naming collisions in batch: {summary}")


def has_errors(diagnostics: List[Diagnostic]) -> bool:
    return any(d.severity == Severity.ERROR for d in diagnostics)
