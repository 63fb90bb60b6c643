BODY_REQUIRED_MESSAGE = "Request body is required. Please provide the necessary data."


def require_body(data):
    """Reject an empty JSON object before any field is validated."""
    if isinstance(data, dict) and not data:
        raise ValueError(BODY_REQUIRED_MESSAGE)
    return data
