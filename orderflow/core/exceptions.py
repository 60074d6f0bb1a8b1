"""
Domain errors shared by the order lifecycle and the stock ledgers.

Each error knows the HTTP status it maps to and renders a structured payload
through ``as_dict()``; views turn them into responses, so callers always get
detail instead of a bare boolean.
"""


class OrderflowError(Exception):
    status_code = 500
    code = 'internal_error'

    def __init__(self, message=None, **detail):
        self.message = message or self.default_message()
        self.detail = detail
        super().__init__(self.message)

    def default_message(self):
        return 'Internal server error'

    def as_dict(self):
        payload = {'error': self.message, 'code': self.code}
        payload.update(self.detail)
        return payload


class NotFound(OrderflowError):
    status_code = 404
    code = 'not_found'

    def default_message(self):
        return 'Not found'


class ValidationFailed(OrderflowError):
    status_code = 400
    code = 'validation_error'

    def default_message(self):
        return 'Invalid input'


class TransitionBlocked(OrderflowError):
    """A forward move was refused because documents or fields are missing"""
    status_code = 422
    code = 'missing_requirements'

    def __init__(self, report):
        self.report = report
        super().__init__(
            f"Order cannot move to {report.target_status} until requirements are met",
            **report.as_dict()
        )


class InsufficientStock(OrderflowError):
    status_code = 409
    code = 'insufficient_stock'

    def __init__(self, current_quantity, delta, message=None):
        self.current_quantity = current_quantity
        self.delta = delta
        super().__init__(
            message or 'Insufficient stock for this operation',
            current_quantity=current_quantity,
            delta=delta,
        )


class Conflict(OrderflowError):
    """Duplicate-row creation race; safe to retry as an update"""
    status_code = 409
    code = 'conflict'

    def default_message(self):
        return 'A conflicting row already exists'
