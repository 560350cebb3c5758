from rest_framework.response import Response

from .exceptions import status_for


def error_response(exc):
    """Render a SwapServiceError as ``{'error': ..., 'code': ...}``."""
    return Response(
        {'error': exc.message, 'code': exc.code},
        status=status_for(exc),
    )
