# File: app/core/identity_provider.py
from typing import Any, Dict, Optional
import requests
from app.core.config import settings
from app.core.exceptions import IdentityProviderError, UnauthenticatedError
from app.core.security import decode_access_token, get_token_kid, select_signing_key
import logging

logger = logging.getLogger(__name__)


class SupabaseAuth:
    """Thin client for the Supabase Auth REST API plus JWKS-backed token verification"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        anon_key: Optional[str] = None,
        service_key: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        self.base_url = (base_url or settings.SUPABASE_URL).rstrip("/")
        self.anon_key = anon_key or settings.SUPABASE_ANON_KEY
        self.service_key = service_key or settings.SUPABASE_SERVICE_KEY
        self.timeout = timeout or settings.IDENTITY_PROVIDER_TIMEOUT
        self.jwks_url = settings.jwks_url if base_url is None else f"{self.base_url}/auth/v1/.well-known/jwks.json"
        self._jwks: Optional[Dict[str, Any]] = None

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    def _headers(self, bearer: Optional[str] = None, admin: bool = False) -> Dict[str, str]:
        api_key = self.service_key if admin else (self.anon_key or self.service_key)
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["apikey"] = api_key
        token = bearer or (self.service_key if admin else None)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        bearer: Optional[str] = None,
        admin: bool = False,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = requests.request(
                method,
                url,
                headers=self._headers(bearer=bearer, admin=admin),
                json=json,
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"❌ Identity provider unreachable: {method} {path} - {e}")
            raise IdentityProviderError("Identity provider is unavailable")

        if response.status_code >= 400:
            detail = self._error_message(response)
            logger.warning(f"⚠️ Identity provider rejected {method} {path}: {response.status_code} {detail}")
            raise IdentityProviderError(detail, upstream_status=response.status_code)

        if not response.content:
            return {}
        return response.json()

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"Identity provider error ({response.status_code})"
        if isinstance(body, dict):
            for key in ("msg", "error_description", "message", "error"):
                if body.get(key):
                    return str(body[key])
        return f"Identity provider error ({response.status_code})"

    # ------------------------------------------------------------------
    # Users and sessions
    # ------------------------------------------------------------------

    def create_user(self, email: str, password: str, metadata: Dict[str, Any]) -> Dict[str, Any]:
        """Create a confirmed user; returns the provider user record (id, email, ...)"""
        data = self._request(
            "POST",
            "/auth/v1/admin/users",
            admin=True,
            json={
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": metadata,
            },
        )
        # Older GoTrue versions wrap the record in {"user": {...}}
        return data.get("user", data)

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        """Password grant; returns the session (access_token, refresh_token, expires_at, user)"""
        return self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )

    def sign_out(self, access_token: str) -> None:
        self._request("POST", "/auth/v1/logout", bearer=access_token)

    def get_user(self, external_id: str) -> Dict[str, Any]:
        data = self._request("GET", f"/auth/v1/admin/users/{external_id}", admin=True)
        return data.get("user", data)

    # ------------------------------------------------------------------
    # Token verification
    # ------------------------------------------------------------------

    def fetch_jwks(self, force: bool = False) -> Dict[str, Any]:
        if self._jwks is None or force:
            try:
                response = requests.get(self.jwks_url, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as e:
                logger.error(f"❌ Could not fetch JWKS from {self.jwks_url}: {e}")
                raise IdentityProviderError("Could not fetch identity provider signing keys")
            self._jwks = response.json()
            logger.info(f"🔑 Loaded {len(self._jwks.get('keys', []))} signing key(s) from identity provider")
        return self._jwks

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        kid = get_token_kid(token)
        key = select_signing_key(self.fetch_jwks(), kid)
        if key is None:
            # Keys may have been rotated since the set was cached
            key = select_signing_key(self.fetch_jwks(force=True), kid)
        if key is None:
            logger.warning(f"Access token signed with unknown key id: {kid}")
            raise UnauthenticatedError("Invalid access token")
        return decode_access_token(token, key)


supabase_auth = SupabaseAuth()


def get_identity_provider() -> SupabaseAuth:
    return supabase_auth
