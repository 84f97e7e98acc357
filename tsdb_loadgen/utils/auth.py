"""HTTP authentication header helpers."""

import base64


def basic_auth_header(username: str, token: str) -> str:
    """Build an HTTP basic ``Authorization`` header value.

    Args:
        username: User name, may be empty.
        token: Password or API token, may be empty.

    Returns:
        Header value in format: Basic {base64(username:token)}
    """
    credentials = f"{username}:{token}".encode("utf-8")
    return f"Basic {base64.b64encode(credentials).decode('ascii')}"
