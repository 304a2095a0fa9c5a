# Overview: Domain and store error types raised by the core; routes map them to responses.

"""
PVZ Error Hierarchy

DomainError: the request violated a business rule. Terminal for the request,
never retried inside the core.

StoreError: persistence failed for a reason that is not a business rule
(zero rows affected, connectivity, timeout). Propagated unchanged to the
caller of the manager.

Store implementations translate "no rows" lookups into the specific
NotFound-style DomainError at the store boundary.
"""


class PVZError(Exception):
    """Base class for all errors raised by the PVZ core."""
    pass


class DomainError(PVZError):
    """Raised when an operation violates a business rule."""
    pass


class ActiveReceptionExistsError(DomainError):
    """Raised when a reception is opened while another is in progress."""

    def __init__(self, pvz_id: str | None = None):
        self.pvz_id = pvz_id
        super().__init__("active reception exists")


class NoActiveReceptionError(DomainError):
    """Raised when an operation requires an open reception and none exists."""

    def __init__(self, pvz_id: str | None = None):
        self.pvz_id = pvz_id
        super().__init__("no active reception")


class InvalidProductTypeError(DomainError):
    """Raised when a product type is not in the allow-list."""

    def __init__(self, product_type: str | None = None):
        self.product_type = product_type
        super().__init__("invalid product type")


class InvalidCityError(DomainError):
    """Raised when a pickup point city is not in the allow-list."""

    def __init__(self, city: str | None = None):
        self.city = city
        super().__init__("invalid city")


class InvalidRoleError(DomainError):
    """Raised when a user role is neither employee nor moderator."""

    def __init__(self, role: str | None = None):
        self.role = role
        super().__init__("invalid role")


class PasswordValidationError(DomainError):
    """Raised when a password doesn't meet strength requirements."""
    pass


class ProductNotFoundError(DomainError):
    """Raised when a reception has no product to return or delete."""

    def __init__(self, reception_id: str | None = None):
        self.reception_id = reception_id
        super().__init__("product not found")


class PickupPointNotFoundError(DomainError):
    """Raised when a pickup point id does not exist."""

    def __init__(self, pvz_id: str | None = None):
        self.pvz_id = pvz_id
        super().__init__("pickup point not found")


class ReceptionNotFoundError(DomainError):
    """Raised when a reception id does not exist."""

    def __init__(self, reception_id: str | None = None):
        self.reception_id = reception_id
        super().__init__("reception not found")


class UserNotFoundError(DomainError):
    """Raised when no user has the given email or id."""
    def __init__(self):
        super().__init__("user not found")


class EmailExistsError(DomainError):
    """Raised when registering an email that is already taken."""
    def __init__(self):
        super().__init__("email exists")


class InvalidCredentialsError(DomainError):
    """Raised when login fails for any reason (unknown email or bad password)."""
    def __init__(self):
        super().__init__("invalid credentials")


class StoreError(PVZError):
    """Raised when the persistence layer fails outside of a business rule."""
    pass


class ProductDeleteConflictError(StoreError):
    """
    Raised when deleting the last product affected zero rows.

    The product existed at lookup time and vanished before the delete,
    which is distinct from ProductNotFoundError (never existed).
    """

    def __init__(self, product_id: str | None = None):
        self.product_id = product_id
        super().__init__("no product deleted")


class StoreUnavailableError(StoreError):
    """Raised when the store cannot be reached or refuses the operation."""
    pass


class StoreTimeoutError(StoreUnavailableError):
    """Raised when an operation exceeds its caller-supplied deadline."""
    pass
