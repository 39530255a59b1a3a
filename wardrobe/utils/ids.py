"""
Wardrobe Colors Request ID Utilities
Generate unique request IDs for tracing.
"""
import uuid
from datetime import datetime


def generate_request_id(prefix: str = "req") -> str:
    """
    Generate a unique request ID for tracking.

    Args:
        prefix: Short tag naming the operation ("extract", "harmony", ...)

    Returns:
        Unique request ID string such as ``extract-20250101120000-1a2b3c4d``
    """
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    short_uuid = str(uuid.uuid4())[:8]
    return f"{prefix}-{timestamp}-{short_uuid}"


def extract_timestamp_from_request_id(request_id: str) -> str:
    """
    Extract timestamp from request ID.

    Args:
        request_id: Request ID string

    Returns:
        Timestamp string or empty if not found
    """
    parts = request_id.split("-")
    if len(parts) >= 3 and parts[1].isdigit() and len(parts[1]) == 14:
        return parts[1]
    return ""
