"""Response formatting bridge -- maps :class:`~httpslots.models.Response` to the output system.

After a request completes, :func:`format_api_response` writes the status line
to stderr and routes the body through
:meth:`~httpslots.output.OutputManager.format_response`.
"""

from __future__ import annotations

from typing import Any

from httpslots.models import Response
from httpslots.output import get_output


def format_api_response(response: Response) -> None:
    """Format and print a response using the global output system.

    Args:
        response: The :class:`~httpslots.models.Response` to display.
    """
    output = get_output()

    output.info(f"HTTP {response.status} {response.status_text}".rstrip())

    content_type = response.headers.get("content-type", "application/json")

    data = extract_response_data(response)
    if data is not None:
        output.format_response(data, content_type)


def extract_response_data(response: Response) -> Any:
    """Return the body to display, or ``None`` for an empty one.

    Bytes bodies are decoded as UTF-8 with replacement characters.
    """
    data = response.data
    if data is None or data == "" or data == b"":
        return None
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data
