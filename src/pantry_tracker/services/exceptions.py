"""Service layer exception classes for Pantry Tracker.

This module defines all custom exceptions used by the service layer to provide
consistent error handling across the application.

Exception Hierarchy:
    ServiceError (base)
    ├── NotFound
    │   ├── InventoryItemNotFound
    │   ├── CollectionNotFound
    │   └── CategoryNotFound
    ├── DuplicateName
    ├── ValidationError
    │   ├── InvalidQuantity
    │   └── UnsupportedConversion
    ├── ReferentialConflict
    └── StorageError
"""

from typing import Optional


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions should inherit from this class.
    """

    pass


class NotFound(ServiceError):
    """Raised when a referenced record does not exist.

    Args:
        entity: Entity type name (e.g. "Inventory item")
        entity_id: The ID that was not found
    """

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with ID {entity_id} not found")


class InventoryItemNotFound(NotFound):
    """Raised when inventory item cannot be found by ID.

    Example:
        >>> raise InventoryItemNotFound(456)
        InventoryItemNotFound: Inventory item with ID 456 not found
    """

    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__("Inventory item", item_id)


class CollectionNotFound(NotFound):
    """Raised when collection cannot be found by ID.

    Example:
        >>> raise CollectionNotFound(12)
        CollectionNotFound: Collection with ID 12 not found
    """

    def __init__(self, collection_id: int):
        self.collection_id = collection_id
        super().__init__("Collection", collection_id)


class CategoryNotFound(NotFound):
    """Raised when category cannot be found by ID."""

    def __init__(self, category_id: int):
        self.category_id = category_id
        super().__init__("Category", category_id)


class DuplicateName(ServiceError):
    """Raised when a name collides with an existing record.

    Inventory item names collide case-insensitively ("Rice" vs "rice").

    Args:
        entity: Entity type name
        name: The rejected name

    Example:
        >>> raise DuplicateName("Inventory item", "rice")
        DuplicateName: Inventory item with name 'rice' already exists
    """

    def __init__(self, entity: str, name: str):
        self.entity = entity
        self.name = name
        super().__init__(f"{entity} with name '{name}' already exists")


class ValidationError(ServiceError):
    """Raised when data validation fails.

    Args:
        errors: List of validation error messages
    """

    def __init__(self, errors: list):
        self.errors = errors
        error_msg = "; ".join(errors)
        super().__init__(f"Validation failed: {error_msg}")


class InvalidQuantity(ValidationError):
    """Raised when a quantity cannot be used as a denominator.

    Example:
        >>> raise InvalidQuantity(0)
        InvalidQuantity: Validation failed: Quantity must be greater than zero (got 0)
    """

    def __init__(self, quantity):
        self.quantity = quantity
        super().__init__([f"Quantity must be greater than zero (got {quantity})"])


class UnsupportedConversion(ValidationError):
    """Raised when a purchase unit and an item unit belong to different dimensions.

    Example:
        >>> raise UnsupportedConversion("ml", "kg")
        UnsupportedConversion: Validation failed: Cannot convert ml to kg: incompatible unit types
    """

    def __init__(self, from_unit: str, to_unit: str):
        self.from_unit = from_unit
        self.to_unit = to_unit
        super().__init__([f"Cannot convert {from_unit} to {to_unit}: incompatible unit types"])


class ReferentialConflict(ServiceError):
    """Raised when a record cannot be deleted because other records use it.

    Args:
        entity: Entity type name
        entity_id: ID of the record being deleted
        dependencies: Dictionary of dependency counts {entity_type: count}

    Example:
        >>> raise ReferentialConflict("Inventory item", 3, {"collection_items": 2})
        ReferentialConflict: Cannot delete inventory item 3: used in 2 collection_items
    """

    def __init__(self, entity: str, entity_id: int, dependencies: dict):
        self.entity = entity
        self.entity_id = entity_id
        self.dependencies = dependencies

        details = ", ".join(
            f"{count} {entity_type}" for entity_type, count in dependencies.items() if count > 0
        )

        super().__init__(f"Cannot delete {entity.lower()} {entity_id}: used in {details}")


class StorageError(ServiceError):
    """Raised when a database operation fails.

    Args:
        message: Description of the failed operation
        original_error: The underlying exception
        retryable: True when the engine reported a busy/locked database
    """

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        retryable: bool = False,
    ):
        self.original_error = original_error
        self.retryable = retryable
        super().__init__(f"Database error: {message}")
