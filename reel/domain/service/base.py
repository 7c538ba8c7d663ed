"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold the client-side state of one video context and the
    logic that keeps it consistent with the server.
    """

    pass
