"""
HTTP client used by the Streamlit operator console.
"""
import os
from typing import Any, Dict, List, Optional

import requests

DEFAULT_TIMEOUT = 10


def get_api_base_url() -> str:
    """
    Normalize API base URL from environment variable.

    - Empty env var -> http://localhost:3000 (local dev)
    - Full URL (http:// or https://) -> use as-is
    - Bare hostname -> prepend https://
    """
    raw = os.getenv("API_BASE_URL", "").strip().rstrip("/")
    if not raw:
        return "http://localhost:3000"
    if raw.startswith("http://") or raw.startswith("https://"):
        return raw
    return f"https://{raw}"


class APIRequestError(Exception):
    """The server answered with an error body, or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error = error


class KeyManagerClient:
    """Thin wrapper over the key manager HTTP endpoints."""

    def __init__(self, base_url: Optional[str] = None, timeout: int = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = (base_url or get_api_base_url()).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, *, expected=(200,), **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise APIRequestError(f"Request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code not in expected:
            message = f"HTTP {response.status_code}"
            error = None
            if isinstance(body, dict):
                message = body.get("message") or str(body.get("detail") or message)
                error = body.get("error")
            raise APIRequestError(message, status_code=response.status_code, error=error)
        return body

    def server_status(self) -> Dict[str, Any]:
        return self._request("GET", "/")

    def register_user(self, first_name: str, last_name: str, email: str) -> Dict[str, Any]:
        """Register a user; returns {"message", "apiKey", "expires"}."""
        return self._request(
            "POST",
            "/user/register",
            expected=(201,),
            json={"firstName": first_name, "lastName": last_name, "email": email},
        )

    def validate_key(self, api_key: str) -> Dict[str, Any]:
        """
        Validate a key. Rejections (401/403) are verdicts, not errors, and are
        returned as their body with valid=false.
        """
        return self._request(
            "POST",
            "/validate-apikey",
            expected=(200, 401, 403),
            json={"apiKeyToValidate": api_key},
        )

    def register_admin(self, email: str, password: str) -> Dict[str, Any]:
        return self._request(
            "POST", "/admin/register", expected=(201,), json={"email": email, "password": password}
        )

    def login(self, email: str, password: str) -> str:
        """Log in as admin and return the bearer credential."""
        body = self._request("POST", "/admin/login", json={"email": email, "password": password})
        return body["credential"]

    def list_users(self, credential: str) -> List[Dict[str, Any]]:
        return self._request(
            "GET", "/admin/users", headers={"Authorization": f"Bearer {credential}"}
        )
