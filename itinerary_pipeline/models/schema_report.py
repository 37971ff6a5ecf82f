"""
Structured markup validation report.

Dependencies: pydantic
System role: Result of validating generated JSON-LD
"""

from enum import Enum

from pydantic import BaseModel, Field


class SchemaStatus(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


class SchemaValidationResult(BaseModel):
    status: SchemaStatus
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
