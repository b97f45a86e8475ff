# app/core/errors.py
"""
Domain errors for the shop backend.

Raised by services/repositories and translated into HTTP responses
by the exception handlers registered in `app.main`.

Kinds:
  - ValidationError     : bad upload or rejected password, caller must fix the input
  - AuthenticationError : wrong credentials at login
  - NotFoundError       : unknown id
  - DependencyError     : database / storage / Supabase Auth failure, surfaced as-is
  - ConflictError       : email already registered (products have no uniqueness rule)
"""

import uuid


class CatalogError(Exception):
    """Base class for every error the backend raises on purpose."""


class ValidationError(CatalogError):
    pass


class FileTooLargeError(ValidationError):
    pass


class InvalidFileTypeError(ValidationError):
    pass


class AuthenticationError(CatalogError):
    pass


class NotFoundError(CatalogError):
    pass


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: int):
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: uuid.UUID):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class DependencyError(CatalogError):
    pass


class ImageStoreError(DependencyError):
    pass


class IdentityError(DependencyError):
    pass


class ConflictError(CatalogError):
    pass


class EmailTakenError(ConflictError):
    def __init__(self, email: str):
        super().__init__(f"Email already registered: {email}")
        self.email = email
