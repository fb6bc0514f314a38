import json
import logging
from functools import wraps

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt

from booking.exceptions import BookingError

logger = logging.getLogger(__name__)


class MalformedBody(BookingError):
    default_message = "Request body must be a JSON object"


def json_error(message, status=400, **extra):
    """Uniform failure shape for every API endpoint."""
    payload = {"success": False, "error": message}
    payload.update(extra)
    return JsonResponse(payload, status=status)


def form_error(form, message=None):
    """400 response listing each field's first error; the first one doubles as the message."""
    details = {field: errors[0] for field, errors in form.errors.items()}
    if message is None:
        message = next(iter(details.values()), "Invalid request data")
    return json_error(message, status=400, details=details)


def json_body(request):
    """Parse the request body as a JSON object; empty body counts as {}."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (UnicodeDecodeError, ValueError):
        raise MalformedBody()
    if not isinstance(data, dict):
        raise MalformedBody()
    return data


def api_view(view):
    """
    Boundary for JSON endpoints: BookingError subclasses become their
    status code, anything else is logged and reported as a generic 500.
    """
    @csrf_exempt
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except BookingError as exc:
            return json_error(exc.message, status=exc.status_code)
        except Exception:
            logger.exception("Unhandled error in %s %s", request.method, request.path)
            return json_error("Internal server error", status=500)

    return wrapper


def allow_methods(*methods):
    """JSON counterpart of require_http_methods: 405 in the usual error shape."""
    def decorator(view):
        @wraps(view)
        def inner(request, *args, **kwargs):
            if request.method not in methods:
                logger.warning("Method %s not allowed on %s", request.method, request.path)
                response = json_error("Method not allowed", status=405)
                response["Allow"] = ", ".join(methods)
                return response
            return view(request, *args, **kwargs)

        return inner

    return decorator
