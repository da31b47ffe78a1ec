"""Error taxonomy for the order service.

Only persistence errors are meant to escape a submission. Everything here is
either mapped to an HTTP status at the edge or converted into a structured
result before it reaches the caller.
"""


class OrderServiceError(Exception):
    """Base class for all order service errors."""


class ValidationError(OrderServiceError):
    """Client input is malformed. Nothing has been persisted."""


class NotFoundError(OrderServiceError):
    """The referenced order does not exist."""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class NoItemsError(OrderServiceError):
    """The order exists but has no line items to submit."""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} has no items")


class ExternalServiceError(OrderServiceError):
    """An outbound call kept failing after every allowed attempt."""

    def __init__(self, message: str, attempts: int):
        self.attempts = attempts
        super().__init__(message)


class PublishError(OrderServiceError):
    """A single event sink failed to accept an event."""

    def __init__(self, sink: str, message: str):
        self.sink = sink
        super().__init__(f"{sink}: {message}")


class ServiceNotConfiguredError(OrderServiceError):
    """An optional collaborator was needed but is not configured."""
