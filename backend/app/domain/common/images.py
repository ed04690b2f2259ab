"""Image data URL checks shared by the report and collection flows."""
import base64
import binascii

from app.domain.common.errors import ValidationError

NOT_AN_IMAGE = "Please select an image file (JPEG, PNG, etc.)"
IMAGE_TOO_LARGE = "Image size should be less than 5MB"


def image_size_bytes(image_data_url: str) -> int:
    """Validate an image data URL (data:image/...;base64,...) and return the decoded payload size."""
    value = (image_data_url or "").strip()
    header, sep, data = value.partition(",")
    if not header.startswith("data:") or not sep:
        raise ValidationError(NOT_AN_IMAGE)
    mime, *params = header[len("data:"):].split(";")
    if not mime.lower().startswith("image/"):
        raise ValidationError(NOT_AN_IMAGE)
    if "base64" not in params:
        return len(data.encode())
    try:
        return len(base64.b64decode(data, validate=True))
    except (binascii.Error, ValueError):
        raise ValidationError(NOT_AN_IMAGE) from None


def validate_image(image_data_url: str, max_bytes: int) -> None:
    if image_size_bytes(image_data_url) > max_bytes:
        raise ValidationError(IMAGE_TOO_LARGE)
