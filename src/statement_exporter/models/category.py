"""Category data model."""

from dataclasses import dataclass
from typing import Optional

# Display name for transactions without any category
UNCATEGORIZED_NAME = "Uncategorized"

# Grouping key for transactions without any category
UNCATEGORIZED_KEY = "uncategorized"


@dataclass
class Category:
    """Category as supplied by the data layer.

    Attributes:
        id: Unique identifier for this category.
        name: Human-readable name (may be missing on malformed records).
        icon: Optional icon identifier.
    """

    id: str
    name: Optional[str] = None
    icon: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Name used in exported sheets, never empty."""
        return self.name or UNCATEGORIZED_NAME

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "Category":
        """Create a Category from a data-layer record.

        Args:
            data: Dictionary containing category data.

        Returns:
            A new Category instance.

        Raises:
            ValueError: If the record has no id.
        """
        if data.get("id") in (None, ""):
            raise ValueError("Category record is missing 'id'")

        name = data.get("name")
        icon = data.get("icon")
        return cls(
            id=str(data["id"]),
            name=str(name) if name is not None else None,
            icon=str(icon) if icon is not None else None,
        )
