"""The ten fixed rubric categories."""

from __future__ import annotations

from enum import Enum


class Category(str, Enum):
    """Rubric dimensions, in report declaration order."""

    LAYOUT = "layout"
    NAMING = "naming"
    FUNCTION_DESIGN = "function_design"
    CLASS_DESIGN = "class_design"
    ERROR_HANDLING = "error_handling"
    CONFIGURATION = "configuration"
    TESTING = "testing"
    LOGGING = "logging"
    PERFORMANCE = "performance"
    VERSION_CONTROL = "version_control"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def order(self) -> int:
        return _ORDER[self]

    @classmethod
    def from_slug(cls, slug: str) -> Category:
        """Resolve a category from its slug, case-insensitively."""
        normalized = slug.strip().lower().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError:
            choices = ", ".join(item.value for item in cls)
            raise ValueError(f"Unknown category '{slug}'. Expected one of: {choices}") from None


_LABELS: dict[Category, str] = {
    Category.LAYOUT: "Layout & Formatting",
    Category.NAMING: "Naming",
    Category.FUNCTION_DESIGN: "Function Design",
    Category.CLASS_DESIGN: "Class Design",
    Category.ERROR_HANDLING: "Error Handling",
    Category.CONFIGURATION: "Configuration & Modularity",
    Category.TESTING: "Testing",
    Category.LOGGING: "Logging",
    Category.PERFORMANCE: "Performance",
    Category.VERSION_CONTROL: "Version Control",
}

_ORDER: dict[Category, int] = {category: index for index, category in enumerate(Category)}

ALL_CATEGORIES: tuple[Category, ...] = tuple(Category)

DEFAULT_CATEGORY_WEIGHT = 1.0 / len(ALL_CATEGORIES)
