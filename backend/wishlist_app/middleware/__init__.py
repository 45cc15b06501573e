from wishlist_app.middleware.request_log import RequestLoggingMiddleware
from wishlist_app.middleware.security import SecurityHeadersMiddleware

__all__ = ["RequestLoggingMiddleware", "SecurityHeadersMiddleware"]
