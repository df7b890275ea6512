from typing import Any, Tuple

from pydantic import HttpUrl, TypeAdapter, ValidationError as PydanticValidationError

from auditapi.core.devices import DeviceProfile
from auditapi.core.errors import ValidationError

URL_REQUIRED = "URL is required"
URL_INVALID = "Invalid URL format. Please include http:// or https://"
DEVICE_INVALID = "Device must be either mobile or desktop"

_http_url = TypeAdapter(HttpUrl)


def parse_url(url: Any) -> str:
    """Check ``url`` is an absolute http(s) URL and return it unchanged."""
    if not url:
        raise ValidationError(URL_REQUIRED)
    if not isinstance(url, str):
        raise ValidationError(URL_INVALID)
    try:
        _http_url.validate_python(url)
    except PydanticValidationError:
        raise ValidationError(URL_INVALID)
    return url


def parse_device(device: Any) -> DeviceProfile:
    try:
        return DeviceProfile(device)
    except (ValueError, TypeError):
        raise ValidationError(DEVICE_INVALID)


def validate_request(url: Any, device: Any = "mobile") -> Tuple[str, DeviceProfile]:
    """Validate raw request fields, url first then device."""
    return parse_url(url), parse_device(device)
