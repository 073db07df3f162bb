"""Minimal admin client for the identity provider's user API (GoTrue-compatible)."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, cast
from uuid import uuid4

import httpx
from pydantic import SecretStr

logger = logging.getLogger(__name__)


class IdentityProviderError(RuntimeError):
    """Raised when the identity provider responds with an error."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        *,
        error_body: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_body = error_body


class IdentityAdminClient:
    """Thin client for the identity provider's admin endpoints."""

    def __init__(
        self,
        *,
        service_key: str | SecretStr,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        secret_value = (
            service_key.get_secret_value() if isinstance(service_key, SecretStr) else service_key
        )
        if not secret_value:
            raise ValueError("Identity service key must be provided")

        self._service_key = secret_value
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def create_user(
        self,
        *,
        email: str,
        password: str,
        user_metadata: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        """Create a confirmed account and return the provider's user record."""

        body = {
            "email": email,
            "password": password,
            "email_confirm": True,
            "user_metadata": user_metadata or {},
        }
        return self.request("POST", "/admin/users", json_body=body)

    def update_user(
        self,
        user_id: str,
        *,
        email: str | None = None,
        user_metadata: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if email is not None:
            body["email"] = email
        if user_metadata:
            body["user_metadata"] = user_metadata
        return self.request("PUT", f"/admin/users/{user_id}", json_body=body)

    def delete_user(self, user_id: str) -> None:
        if not user_id:
            raise ValueError("user_id must be provided")
        self.request("DELETE", f"/admin/users/{user_id}")

    def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        """Perform a raw admin API request and return the parsed JSON payload."""

        url = f"{self._base_url}{path}"
        headers = {
            "Accept": "application/json",
            "apikey": self._service_key,
            "Authorization": f"Bearer {self._service_key}",
        }
        with httpx.Client(
            timeout=self._timeout, transport=self._transport, headers=headers
        ) as client:
            try:
                response = client.request(method, url, json=json_body)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                error_payload: Any | None
                try:
                    error_payload = exc.response.json()
                except json.JSONDecodeError:
                    error_payload = exc.response.text

                logger.error(
                    "Identity API error %s for %s %s: %s",
                    status,
                    method,
                    path,
                    exc.response.text[:500],
                )
                raise IdentityProviderError(
                    f"Identity provider responded with status {status}",
                    status_code=status,
                    error_body=error_payload,
                ) from exc
            except httpx.RequestError as exc:
                logger.error("Identity request failure for %s %s: %s", method, path, str(exc))
                raise IdentityProviderError("Failed to reach identity provider") from exc

        if not response.content:
            return {}
        try:
            return cast(Dict[str, Any], response.json())
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON from identity provider for %s %s", method, path)
            raise IdentityProviderError("Received malformed JSON from identity provider") from exc


class FakeIdentityAdminClient(IdentityAdminClient):
    """In-memory stand-in for local development and tests."""

    def __init__(self) -> None:
        super().__init__(service_key="fake-identity-key", base_url="http://identity.invalid")
        self._logger = logging.getLogger(self.__class__.__name__)
        self.users: Dict[str, Dict[str, Any]] = {}

    def create_user(
        self,
        *,
        email: str,
        password: str,
        user_metadata: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        normalized = email.strip().lower()
        if any(user["email"] == normalized for user in self.users.values()):
            raise IdentityProviderError(
                "A user with this email address has already been registered", status_code=422
            )
        user_id = str(uuid4())
        record = {"id": user_id, "email": normalized, "user_metadata": dict(user_metadata or {})}
        self.users[user_id] = record
        self._logger.debug("Fake identity user created", extra={"user_id": user_id})
        return dict(record)

    def update_user(
        self,
        user_id: str,
        *,
        email: str | None = None,
        user_metadata: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        record = self.users.setdefault(user_id, {"id": user_id, "email": "", "user_metadata": {}})
        if email is not None:
            record["email"] = email.strip().lower()
        if user_metadata:
            record["user_metadata"].update(user_metadata)
        return dict(record)

    def delete_user(self, user_id: str) -> None:
        self.users.pop(user_id, None)
