"""
Normalization of invocation payloads.

Callers deliver input as a JSON string body, an already parsed body, or flat
top-level fields. ``normalize_request`` accepts all three.
"""

import json
from typing import Any, Dict, Mapping

from .exceptions import MalformedRequest


def normalize_request(event: Any, required_field: str) -> Dict[str, Any]:
    """
    Extract the input mapping from an invocation event.

    Args:
        event: Raw invocation payload
        required_field: Field that must be present in the extracted input

    Returns:
        The input as a plain dict

    Raises:
        MalformedRequest: If no supported shape yields ``required_field``
    """
    if not isinstance(event, Mapping):
        raise MalformedRequest(f"Invalid event format - no {required_field} found")

    body = event.get("body")

    if isinstance(body, str) and body:
        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise MalformedRequest(f"Request body is not valid JSON: {e}") from e
    elif isinstance(body, Mapping) and body:
        data = body
    elif event.get(required_field) is not None:
        data = event
    else:
        raise MalformedRequest(f"Invalid event format - no {required_field} found")

    if not isinstance(data, Mapping) or data.get(required_field) is None:
        raise MalformedRequest(f"Invalid event format - no {required_field} found")

    return dict(data)
