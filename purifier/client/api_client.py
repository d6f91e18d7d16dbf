"""
HTTP client for the purifier backend.

Wraps an `httpx.Client` (anything with the same request API works, including
FastAPI's TestClient), attaches the bearer token and turns error responses
into `ApiError`.
"""
from typing import Any, Dict, Optional

import httpx

from purifier.lib.logging import get_logger


logger = get_logger(__name__)


class ApiError(Exception):
    """Non-2xx response from the backend."""

    def __init__(self, status_code: int, message: str, details: Optional[Dict[str, Any]] = None):
        self.status_code = status_code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @property
    def code(self) -> Optional[str]:
        """Auth error code (e.g. "auth/wrong-password") when the backend sent one."""
        return self.details.get("code")

    def __str__(self) -> str:
        return f"{self.status_code}: {self.message}"


class PurifierClient:
    """Thin JSON client; the server stays the source of truth."""

    def __init__(self, http: httpx.Client, token: Optional[str] = None):
        self.http = http
        self.token = token

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def request(self, method: str, path: str, **kwargs) -> Any:
        response = self.http.request(method, path, headers=self._headers(), **kwargs)

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return None
            return response.json()

        try:
            body = response.json()
        except ValueError:
            body = {}
        message = body.get("error") or response.reason_phrase or "Request failed"
        logger.warning(
            "API request failed",
            extra={"method": method, "path": path, "status_code": response.status_code},
        )
        raise ApiError(response.status_code, message, body.get("details"))

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("POST", path, json=payload)

    def patch(self, path: str, payload: Dict[str, Any]) -> Any:
        return self.request("PATCH", path, json=payload)

    def delete(self, path: str) -> None:
        self.request("DELETE", path)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """Log in and keep the token for later requests."""
        session = self.post("/auth/login", {"email": email, "password": password})
        self.token = session["token"]
        return session

    def logout(self) -> None:
        self.token = None
