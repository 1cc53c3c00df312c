"""
Request ID Utilities
Generate unique request IDs for tracing extraction runs.
"""
import uuid
from datetime import datetime


def generate_request_id(prefix: str = "dc") -> str:
    """
    Generate a unique request ID for tracking.

    Args:
        prefix: Short tag identifying the caller (e.g. "api", "cli")

    Returns:
        Request ID of the form "<prefix>-YYYYmmddHHMMSS-xxxxxxxx"
    """
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    short_uuid = str(uuid.uuid4())[:8]
    return f"{prefix}-{timestamp}-{short_uuid}"
