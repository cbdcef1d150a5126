from typing import Any, Dict, Mapping, Optional

import httpx


def _build_darkfibre_headers(api_key: Optional[str]) -> Dict[str, str]:
    """
    Construct Darkfibre HTTP headers, including the bearer credential when one is given.
    Registration is the only call made without it.
    """
    headers: Dict[str, str] = {"Content-Type": "application/json"}
    if isinstance(api_key, str) and api_key.strip():
        headers["Authorization"] = f"Bearer {api_key.strip()}"
    return headers


def _read_error_body(response: httpx.Response) -> Optional[Mapping[str, Any]]:
    """Return the `{error: {code, message}}` object of a failed response, if it has one."""
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, Mapping):
        return None
    error = payload.get("error")
    if isinstance(error, Mapping) and "code" in error and "message" in error:
        return error
    return None


def _unwrap_data(body: Any) -> Mapping[str, Any]:
    """Return the `data` object of a Darkfibre response envelope."""
    if isinstance(body, Mapping) and isinstance(body.get("data"), Mapping):
        return body["data"]
    raise ValueError(f"Unexpected Darkfibre response envelope: {type(body)!r}")
