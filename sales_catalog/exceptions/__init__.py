"""Custom exceptions for the Sales Catalog application."""


class SalesCatalogError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv


class BusinessLogicError(SalesCatalogError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)


class ValidationError(BusinessLogicError):
    """Request payload failed schema validation."""
    def __init__(self, message="Invalid request", issues=None):
        super().__init__(message, 400, {'type': 'validation', 'issues': issues or []})
        self.issues = issues or []


class NotFoundError(SalesCatalogError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class ProductUnavailableError(BusinessLogicError):
    """A sale line references a product that does not exist or was deleted."""
    def __init__(self, product_id, line=None):
        self.product_id = product_id
        self.line = line
        where = f" (line {line})" if line is not None else ""
        super().__init__(
            f"Product '{product_id}' not available{where}",
            status_code=422,
            payload={'type': 'product_unavailable', 'productId': str(product_id), 'line': line},
        )


class ClientNotFoundError(BusinessLogicError):
    """The client reference of a sale could not be resolved."""
    def __init__(self, client_ref):
        self.client_ref = client_ref
        super().__init__(
            f"Client '{client_ref}' not found",
            status_code=422,
            payload={'type': 'client_not_found', 'clientRef': str(client_ref)},
        )


class EmptySaleError(BusinessLogicError):
    """A sale must contain at least one line."""
    def __init__(self, message="A sale must contain at least one item"):
        super().__init__(message, status_code=422, payload={'type': 'empty_sale'})


class PersistenceError(SalesCatalogError):
    """The sale write transaction could not be committed."""
    def __init__(self, message="Sale could not be saved", cause=None, integrity=False):
        self.cause = cause
        super().__init__(
            message,
            409 if integrity else 500,
            {'type': 'db_integrity' if integrity else 'persistence'},
        )
