import logging
from typing import Any, Optional

import requests

from tracker.session import TokenHolder, TokenStorage

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A failed call to the backend: bad status, transport error or bad JSON.

    The message is the response body text when the server sent one, so it
    can be shown to the user as-is.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def safe_json(resp) -> Any:
    try:
        return resp.json()
    except ValueError as e:
        raise ApiError(f"Invalid JSON response: {e}", resp.status_code) from e


class ApiClient:
    """Thin wrapper over a `requests.Session` that adds the bearer token."""

    def __init__(
        self,
        tokens: TokenHolder,
        session: Optional[requests.Session] = None,
        verify: bool = True,
        timeout: Optional[float] = None,
    ):
        self.tokens = tokens
        self.session = session if session is not None else requests.Session()
        self.verify = verify
        self.timeout = timeout

    def request(self, method: str, url: str, json: Any = None, auth: bool = True):
        if auth:
            if not self.tokens.is_authenticated():
                raise ApiError("Not logged in")
            headers = self.tokens.auth_headers()
        else:
            headers = {"Content-Type": "application/json"}
        try:
            resp = self.session.request(
                method.upper(),
                url,
                headers=headers,
                json=json,
                timeout=self.timeout,
                verify=self.verify,
            )
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method.upper(), url, e)
            raise ApiError(str(e)) from e

        if not resp.ok:
            logger.info("%s %s -> %s", method.upper(), url, resp.status_code)
            raise ApiError(resp.text, resp.status_code)
        return resp

    def get_json(self, url: str) -> Any:
        return safe_json(self.request("GET", url))

    def post(self, url: str, payload: dict, auth: bool = True):
        return self.request("POST", url, json=payload, auth=auth)

    def delete(self, url: str) -> None:
        self.request("DELETE", url)


class AuthClient:
    def __init__(self, api: ApiClient, login_url: str, register_url: str, storage: Optional[TokenStorage] = None):
        self.api = api
        self.login_url = login_url
        self.register_url = register_url
        self.storage = storage

    def login(self, email: str, password: str) -> str:
        """Log in, store the token in the holder (and on disk) and return it."""
        resp = self.api.post(self.login_url, {"email": email, "password": password}, auth=False)
        data = safe_json(resp)
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            logger.error("No token received.")
            raise ApiError("No token received.", resp.status_code)

        self.api.tokens.set(token)
        if self.storage is not None:
            self.storage.save(token)
        logger.info("Login successful for %s", email)
        return token

    def register(self, email: str, password: str) -> None:
        resp = self.api.post(self.register_url, {"email": email, "password": password}, auth=False)
        if resp.status_code not in (200, 201):
            raise ApiError("Error registering user.", resp.status_code)
        logger.info("Registered user %s", email)
