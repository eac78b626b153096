"""
Google Fit client - implicit-grant OAuth helpers and the step aggregate query.
"""

import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qs, urlencode

import httpx

from ..core.exceptions import (
    ConfigurationError,
    FitnessAPIError,
    FitnessTokenExpiredError,
    InvalidRedirectError,
)
from ..models import StepCount

logger = logging.getLogger(__name__)


class GoogleFitClient:
    """
    Client for the Google Fitness REST API.
    Tokens come from the browser-side implicit grant; this client never
    refreshes them.
    """

    AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    AGGREGATE_URL = "https://www.googleapis.com/fitness/v1/users/me/dataset:aggregate"
    SCOPE = "https://www.googleapis.com/auth/fitness.activity.read"
    STATE = "google-fit-connect"
    STEP_DATA_TYPE = "com.google.step_count.delta"
    STEP_DATA_SOURCE = "derived:com.google.step_count.delta:com.google.android.gms:estimated_steps"
    DAY_MILLIS = 24 * 60 * 60 * 1000

    def __init__(self, client_id: Optional[str], redirect_uri: str, timeout: float = 30.0):
        """
        Args:
            client_id: OAuth client id of a Google Cloud project with the Fitness API enabled
            redirect_uri: Where Google sends the browser back with the token fragment
            timeout: Request timeout in seconds
        """
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id)

    def build_authorization_url(self) -> str:
        """
        Build the Google consent URL for the implicit grant.

        Raises:
            ConfigurationError: If no client id is configured
        """
        if not self.is_configured:
            raise ConfigurationError(
                "Google Fit client ID is not configured. Set GOOGLE_CLIENT_ID to enable activity tracking."
            )
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "token",
            "scope": self.SCOPE,
            "state": self.STATE,
        }
        return f"{self.AUTH_URL}?{urlencode(params)}"

    @classmethod
    def parse_redirect_fragment(cls, fragment: str) -> str:
        """
        Extract the access token from an OAuth redirect fragment.

        The fragment is parsed as a strict query string, so key order does
        not matter. It is accepted only with exactly one ``state`` equal to
        ``STATE`` and exactly one non-empty ``access_token``.

        Args:
            fragment: The URL fragment, with or without the leading ``#``

        Returns:
            str: The access token

        Raises:
            InvalidRedirectError: If the fragment is malformed, forged or an error report
        """
        fragment = (fragment or "").strip()
        if fragment.startswith("#"):
            fragment = fragment[1:]
        if not fragment:
            raise InvalidRedirectError("The OAuth redirect fragment is empty.")

        try:
            params = parse_qs(fragment, strict_parsing=True, max_num_fields=32)
        except ValueError as e:
            raise InvalidRedirectError("The OAuth redirect fragment is malformed.") from e

        if params.get("state") != [cls.STATE]:
            raise InvalidRedirectError("OAuth state mismatch; the redirect was not issued by this app.")

        if "error" in params:
            raise InvalidRedirectError(f"Google Fit authorization failed: {params['error'][0]}")

        tokens = params.get("access_token", [])
        if len(tokens) != 1:
            raise InvalidRedirectError("The OAuth redirect did not carry an access token.")
        return tokens[0]

    @staticmethod
    def yesterday_window(now: Optional[datetime] = None) -> Tuple[int, int]:
        """
        Millisecond bounds of the previous UTC calendar day.

        Returns:
            (start, end): ``start`` is yesterday 00:00 UTC, ``end`` today 00:00 UTC (exclusive)
        """
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        today = now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
        yesterday = today - timedelta(days=1)
        return int(yesterday.timestamp() * 1000), int(today.timestamp() * 1000)

    def build_aggregate_request(self, start_time_millis: int, end_time_millis: int) -> Dict[str, Any]:
        """Request body for one single-day step bucket."""
        return {
            "aggregateBy": [{
                "dataTypeName": self.STEP_DATA_TYPE,
                "dataSourceId": self.STEP_DATA_SOURCE,
            }],
            "bucketByTime": {"durationMillis": self.DAY_MILLIS},
            "startTimeMillis": start_time_millis,
            "endTimeMillis": end_time_millis,
        }

    @staticmethod
    def extract_step_count(data: Dict[str, Any], start_time_millis: int, end_time_millis: int) -> StepCount:
        """
        Take the first ``intVal`` found under bucket/dataset/point/value.

        A response without any value yields 0 steps with ``has_data=False``;
        a provider-confirmed zero yields 0 with ``has_data=True``.
        """
        for bucket in data.get("bucket") or []:
            for dataset in bucket.get("dataset") or []:
                for point in dataset.get("point") or []:
                    for value in point.get("value") or []:
                        if "intVal" in value:
                            return StepCount(
                                steps=int(value["intVal"]),
                                has_data=True,
                                start_time_millis=start_time_millis,
                                end_time_millis=end_time_millis,
                            )
        return StepCount(
            steps=0,
            has_data=False,
            start_time_millis=start_time_millis,
            end_time_millis=end_time_millis,
        )

    async def fetch_yesterday_steps(self, access_token: str, now: Optional[datetime] = None) -> StepCount:
        """
        Fetch the aggregated step count for yesterday (UTC).

        Raises:
            FitnessTokenExpiredError: On HTTP 401
            FitnessAPIError: On any other error status or a network failure
        """
        start_time_millis, end_time_millis = self.yesterday_window(now)
        body = self.build_aggregate_request(start_time_millis, end_time_millis)
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

        start_time = time.time()
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(self.AGGREGATE_URL, json=body, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Google Fit request failed: {e}", exc_info=True)
            raise FitnessAPIError(f"Failed to fetch activity: {e}") from e

        duration_ms = round((time.time() - start_time) * 1000, 2)

        if resp.status_code == 401:
            logger.warning(
                "Google Fit token rejected",
                extra={"extra_fields": {"status_code": 401, "duration_ms": duration_ms}}
            )
            raise FitnessTokenExpiredError()

        if resp.status_code >= 400:
            logger.error(
                f"Google Fit API error: HTTP {resp.status_code}",
                extra={"extra_fields": {"status_code": resp.status_code, "duration_ms": duration_ms}}
            )
            raise FitnessAPIError(f"Failed to fetch activity: Google Fit API error (HTTP {resp.status_code}).")

        try:
            data = resp.json()
        except ValueError as e:
            raise FitnessAPIError("Failed to fetch activity: unreadable Google Fit response.") from e

        step_count = self.extract_step_count(data, start_time_millis, end_time_millis)
        logger.info(
            "Google Fit steps fetched",
            extra={"extra_fields": {
                "steps": step_count.steps,
                "has_data": step_count.has_data,
                "start_time_millis": start_time_millis,
                "duration_ms": duration_ms,
            }}
        )
        return step_count
