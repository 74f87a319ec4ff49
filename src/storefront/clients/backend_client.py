"""HTTP client for the storefront backend.

Coupons, order placement and the authenticated user's profile live in the
backend; every call from this service goes through this client so that
timeouts and failures are handled in one place.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError as SchemaError

from storefront.core.exceptions import (
    CouponNotFoundError, ExternalServiceError, NetworkFailureError, ValidationError
)
from storefront.models.coupon import Coupon
from storefront.models.user import UserProfile
from storefront.schemas.coupon_schemas import BackendCoupon, CouponApplyEnvelope, CouponListEnvelope

logger = logging.getLogger(__name__)

SERVICE_NAME = "storefront-backend"

# Default timeout for backend calls (seconds).
_DEFAULT_TIMEOUT = 10.0


class BackendClient:
    """
    Thin wrapper over httpx for the backend's JSON endpoints

    Connection errors and timeouts raise NetworkFailureError; unexpected
    status codes or bodies raise ExternalServiceError.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = _DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    def close(self) -> None:
        self._client.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        token: Optional[str] = None,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            return self._client.request(method, path, json=json, headers=headers)
        except httpx.TimeoutException as e:
            logger.warning(f"Backend {method} {path} timed out: {e}")
            raise NetworkFailureError(SERVICE_NAME)
        except httpx.RequestError as e:
            logger.warning(f"Backend {method} {path} failed: {e}")
            raise NetworkFailureError(SERVICE_NAME)

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            raise ExternalServiceError(SERVICE_NAME, "Backend returned a non-JSON response")
        if not isinstance(body, dict):
            raise ExternalServiceError(SERVICE_NAME, "Backend returned an unexpected response")
        return body

    def list_coupons(self) -> List[Coupon]:
        """All coupons the backend advertises; malformed entries are skipped"""
        response = self._request("GET", "/coupons")
        if response.status_code != 200:
            raise ExternalServiceError(SERVICE_NAME, f"Coupon listing failed with status {response.status_code}")

        envelope = CouponListEnvelope.model_validate(self._json(response))
        coupons = []
        for entry in envelope.data:
            try:
                coupons.append(BackendCoupon.model_validate(entry).to_coupon())
            except SchemaError as e:
                logger.warning(f"Skipping malformed coupon {entry.get('code')!r}: {e.error_count()} errors")
        return coupons

    def lookup_coupon(self, code: str, subtotal: Decimal, user_id: Optional[str] = None) -> Coupon:
        """
        Resolve a coupon code through the backend's apply endpoint

        Raises:
            CouponNotFoundError: backend rejected the code (its message is kept)
            NetworkFailureError: backend unreachable
        """
        payload = {"code": code, "userId": user_id, "cartTotal": float(subtotal)}
        response = self._request("POST", "/coupons/apply", json=payload)

        try:
            body = self._json(response)
        except ExternalServiceError:
            if response.status_code >= 500:
                raise
            raise CouponNotFoundError(code)

        if response.status_code >= 500:
            logger.error(f"Coupon lookup for {code} failed with status {response.status_code}")
            raise ExternalServiceError(SERVICE_NAME, "Coupon service unavailable")

        try:
            envelope = CouponApplyEnvelope.model_validate(body)
        except SchemaError as e:
            logger.warning(f"Unreadable coupon response for {code}: {e.error_count()} errors")
            raise CouponNotFoundError(code)

        if response.status_code != 200 or not envelope.success or envelope.data is None:
            raise CouponNotFoundError(code, envelope.message)

        return envelope.data.to_coupon(code)

    def get_profile(self, token: str) -> UserProfile:
        """Fetch the authenticated user's profile"""
        response = self._request("GET", "/user/profile", token=token)
        if response.status_code == 401:
            return UserProfile.anonymous()
        if response.status_code != 200:
            raise ExternalServiceError(SERVICE_NAME, f"Profile fetch failed with status {response.status_code}")

        body = self._json(response)
        return UserProfile.from_dict(body.get("data"))

    def create_order(self, order: Dict[str, Any], token: Optional[str] = None) -> Dict[str, Any]:
        """Persist a placed order; returns the backend's order document"""
        response = self._request("POST", "/orders", json=order, token=token)
        body = self._json(response)

        if response.status_code >= 500:
            raise ExternalServiceError(SERVICE_NAME, body.get("message") or "Failed to place order")
        if response.status_code >= 400 or not body.get("success", False):
            raise ValidationError(body.get("message") or "Failed to place order")

        return body.get("data") or {}
