"""
Validation utilities for the entity generator.

This module provides validation functions for the output directory and the
table filters, run before any catalog query is issued.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .exceptions import ValidationError


@dataclass
class ValidationResult:
    """Result of a validation operation."""

    is_valid: bool
    errors: List[str]
    warnings: List[str]

    def __post_init__(self):
        """Ensure consistency."""
        if self.errors and self.is_valid:
            self.is_valid = False

    def add_error(self, error: str) -> None:
        """Add an error."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning."""
        self.warnings.append(warning)

    def raise_if_invalid(self, validator: Optional[str] = None) -> None:
        """Raise ValidationError if invalid."""
        if not self.is_valid:
            raise ValidationError(
                f"Validation failed: {'; '.join(self.errors)}",
                validator=validator,
                context={"errors": self.errors, "warnings": self.warnings}
            )


class OutputValidator:
    """Validates where generated modules are written."""

    @staticmethod
    def validate_output_directory(path: str) -> ValidationResult:
        """
        Validate the output directory, creating it when missing.

        The directory must end up existing and writable.
        """
        result = ValidationResult(True, [], [])

        if not path:
            result.add_error("Output directory is required")
            return result

        output_path = Path(path)

        if not output_path.is_absolute():
            result.add_warning("Output directory is not absolute, resolving relative to current directory")

        if output_path.exists() and not output_path.is_dir():
            result.add_error(f"Output path exists but is not a directory: {output_path}")
            return result

        try:
            output_path.mkdir(parents=True, exist_ok=True)

            test_file = output_path / '.write_test'
            test_file.touch()
            test_file.unlink()
        except PermissionError:
            result.add_error(f"No write permission for output directory: {output_path}")
        except OSError as e:
            result.add_error(f"Cannot access output directory: {e}")

        return result


class TableValidator:
    """Validates table inclusion/exclusion filters."""

    @staticmethod
    def validate_table_filters(
        include_tables: Optional[List[str]],
        exclude_tables: Optional[List[str]]
    ) -> ValidationResult:
        result = ValidationResult(True, [], [])

        if include_tables and exclude_tables:
            both = sorted(set(include_tables).intersection(exclude_tables))
            if both:
                result.add_error(f"Tables both included and excluded: {', '.join(both)}")
            else:
                result.add_warning("Both include_tables and exclude_tables specified.")

        return result
