import uuid

from starlette.middleware.base import BaseHTTPMiddleware

from order_service.config import settings


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Echoes the caller's correlation id, or issues one, on every response."""

    def __init__(self, app, header_name: str = settings.correlation_id_header):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request, call_next):
        correlation_id = request.headers.get(self.header_name, "").strip()
        if not correlation_id:
            correlation_id = str(uuid.uuid4())

        request.state.correlation_id = correlation_id
        response = await call_next(request)
        response.headers[self.header_name] = correlation_id
        return response


def get_correlation_id(request) -> str:
    return getattr(request.state, "correlation_id", None) or "-"
