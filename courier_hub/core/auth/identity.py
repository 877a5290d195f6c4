# courier_hub/core/auth/identity.py
"""
Identity providers.

A provider verifies a bearer ID token and yields the verified identity
(email + uid). It can also delete the identity account when an admin
removes a user from the store.
"""
import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional, Protocol

import httpx
from jose import JWTError, jwt

from courier_hub.config.settings import settings
from courier_hub.core.errors import InternalError, Unauthenticated

logger = logging.getLogger(__name__)

_MAX_AGE = re.compile(r"max-age=(\d+)")


@dataclass(frozen=True)
class VerifiedIdentity:
    email: str
    uid: str
    claims: Dict[str, Any] = field(default_factory=dict, compare=False)


class IdentityProvider(Protocol):
    def verify(self, token: str) -> VerifiedIdentity:
        ...

    def delete_account(self, uid: Optional[str], email: str) -> None:
        ...


def _identity_from_claims(claims: Dict[str, Any]) -> VerifiedIdentity:
    email = claims.get("email")
    if not email:
        raise Unauthenticated("Token carries no email")
    uid = claims.get("user_id") or claims.get("sub") or email
    return VerifiedIdentity(email=email.lower(), uid=str(uid), claims=claims)


class _AdminApiMixin:
    """Account deletion through the provider's admin endpoint, when one is configured"""

    admin_url: Optional[str] = None
    admin_api_key: Optional[str] = None
    timeout: float = 5.0

    def delete_account(self, uid: Optional[str], email: str) -> None:
        if not self.admin_url:
            logger.info(f"No identity admin endpoint configured, skipping account deletion for {email}")
            return

        headers = {"X-API-Key": self.admin_api_key} if self.admin_api_key else {}
        with httpx.Client(timeout=self.timeout) as client:
            response = client.delete(
                f"{self.admin_url.rstrip('/')}/accounts/{uid or email}",
                headers=headers,
            )
        if response.status_code not in (200, 204, 404):
            raise InternalError(
                f"Identity provider refused account deletion: {response.status_code}"
            )


class SharedSecretIdentityProvider(_AdminApiMixin):
    """HS256 tokens signed with a shared secret (local development and tests)"""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        admin_url: Optional[str] = None,
        admin_api_key: Optional[str] = None,
        timeout: float = 5.0,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.admin_url = admin_url
        self.admin_api_key = admin_api_key
        self.timeout = timeout

    def create_token(self, email: str, uid: Optional[str] = None, expires_in: timedelta = timedelta(hours=1)) -> str:
        to_encode = {
            "email": email,
            "user_id": uid or email,
            "exp": datetime.now(timezone.utc) + expires_in,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> VerifiedIdentity:
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_aud": False},
            )
        except JWTError as e:
            raise Unauthenticated("Invalid token") from e
        return _identity_from_claims(claims)


class FirebaseIdentityProvider(_AdminApiMixin):
    """Firebase ID tokens: RS256, signed by Google's rotating x509 certificates"""

    def __init__(
        self,
        project_id: str,
        certs_url: str,
        timeout: float = 5.0,
        admin_url: Optional[str] = None,
        admin_api_key: Optional[str] = None,
    ):
        self.project_id = project_id
        self.certs_url = certs_url
        self.timeout = timeout
        self.admin_url = admin_url
        self.admin_api_key = admin_api_key
        self._certs: Dict[str, str] = {}
        self._certs_expire_at = 0.0

    def _public_certs(self) -> Dict[str, str]:
        if self._certs and time.monotonic() < self._certs_expire_at:
            return self._certs

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(self.certs_url)
                response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error(f"Timeout fetching identity certificates from {self.certs_url}")
            raise InternalError("Identity provider timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Error fetching identity certificates: {e}")
            raise InternalError("Identity provider unavailable") from e

        match = _MAX_AGE.search(response.headers.get("cache-control", ""))
        max_age = int(match.group(1)) if match else 3600
        self._certs = response.json()
        self._certs_expire_at = time.monotonic() + max_age
        return self._certs

    def verify(self, token: str) -> VerifiedIdentity:
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise Unauthenticated("Invalid token") from e

        cert = self._public_certs().get(header.get("kid", ""))
        if cert is None:
            raise Unauthenticated("Invalid token")

        try:
            claims = jwt.decode(
                token,
                cert,
                algorithms=["RS256"],
                audience=self.project_id,
                issuer=f"https://securetoken.google.com/{self.project_id}",
                options={"verify_at_hash": False},
            )
        except JWTError as e:
            raise Unauthenticated("Invalid token") from e
        return _identity_from_claims(claims)


@lru_cache()
def get_identity_provider() -> IdentityProvider:
    """Provider selected by settings; overridden in tests"""
    if settings.identity_provider == "shared_secret":
        return SharedSecretIdentityProvider(
            secret_key=settings.identity_secret_key,
            algorithm=settings.identity_algorithm,
            admin_url=settings.identity_admin_url,
            admin_api_key=settings.identity_admin_api_key,
            timeout=settings.identity_timeout_seconds,
        )
    if not settings.firebase_project_id:
        raise InternalError("FIREBASE_PROJECT_ID is required for the firebase identity provider")
    return FirebaseIdentityProvider(
        project_id=settings.firebase_project_id,
        certs_url=settings.firebase_certs_url,
        timeout=settings.identity_timeout_seconds,
        admin_url=settings.identity_admin_url,
        admin_api_key=settings.identity_admin_api_key,
    )
