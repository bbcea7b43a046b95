"""Errors raised while building a route table."""


class RouteConfigError(ValueError):
    """
    A route table could not be built.

    Raised at registration time, before any request is served:

        - the pattern does not compile
        - the handler is missing or not callable
        - the pattern is already registered (ServeMux only)
        - the table was modified after serving started (Router only)
    """

    def __init__(self, message: str, pattern: str = ""):
        super().__init__(message)
        self.pattern = pattern
