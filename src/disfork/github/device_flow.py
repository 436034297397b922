"""OAuth device authorization flow.

GitHub Apps without a client secret authorize command-line tools through
the device flow: the tool obtains a device code, the user enters the
matching user code in a browser, and the tool polls the token endpoint
until the user approves, denies, or the code expires.

See: https://docs.github.com/en/apps/oauth-apps/building-oauth-apps/authorizing-oauth-apps#device-flow
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any

import httpx

from disfork.logging import get_logger
from disfork.schemas.oauth import DeviceCode, TokenResponse

from .exceptions import (
    DeviceFlowDeniedError,
    DeviceFlowError,
    DeviceFlowExpiredError,
    DeviceFlowTimeoutError,
)

logger = get_logger(__name__)

DEVICE_CODE_URL = "https://github.com/login/device/code"
ACCESS_TOKEN_URL = "https://github.com/login/oauth/access_token"
DEVICE_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:device_code"

# Seconds added to the poll interval on every slow_down response
SLOW_DOWN_INCREMENT = 5


class DeviceFlowState(StrEnum):
    """State of a device authorization attempt."""

    STARTED = "started"
    POLLING = "polling"
    AUTHORIZED = "authorized"
    DENIED = "denied"
    EXPIRED = "expired"
    FAILED = "failed"


class DeviceFlowErrorCode(StrEnum):
    """Error codes returned by the token endpoint while polling."""

    AUTHORIZATION_PENDING = "authorization_pending"
    SLOW_DOWN = "slow_down"
    EXPIRED_TOKEN = "expired_token"
    ACCESS_DENIED = "access_denied"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def parse(cls, value: str) -> DeviceFlowErrorCode:
        """Map a raw error code, falling back to UNRECOGNIZED."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNRECOGNIZED


class DeviceAuthorizationPoller:
    """State machine for the OAuth device-code grant.

    Usage:
        async with httpx.AsyncClient() as http:
            poller = DeviceAuthorizationPoller(client_id, http_client=http)
            code = await poller.start()
            print(f"Visit {code.verification_uri} and enter {code.user_code}")
            token = await poller.poll()

    Args:
        client_id: GitHub App (or OAuth App) client ID
        http_client: httpx client for the two OAuth endpoints
        clock: Monotonic clock in seconds
        sleep: Coroutine function used to wait between polls
    """

    def __init__(
        self,
        client_id: str,
        http_client: httpx.AsyncClient,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._client_id = client_id
        self._http = http_client
        self._clock = clock
        self._sleep = sleep
        self._state = DeviceFlowState.STARTED
        self._device_code: DeviceCode | None = None
        self._started_at: float | None = None

    @property
    def state(self) -> DeviceFlowState:
        """Current state of the flow."""
        return self._state

    @property
    def device_code(self) -> DeviceCode | None:
        """Device code issued by start(), if any."""
        return self._device_code

    async def _post_form(self, url: str, data: dict[str, str]) -> dict[str, Any]:
        response = await self._http.post(
            url,
            data=data,
            headers={"Accept": "application/json"},
        )
        response.raise_for_status()
        payload: dict[str, Any] = response.json()
        return payload

    async def start(self) -> DeviceCode:
        """Request a device code and enter the polling state.

        Returns:
            DeviceCode with the user code and verification URI to show

        Raises:
            httpx.HTTPError: If the request fails
        """
        payload = await self._post_form(DEVICE_CODE_URL, {"client_id": self._client_id})
        self._device_code = DeviceCode.model_validate(payload)
        self._started_at = self._clock()
        self._state = DeviceFlowState.POLLING
        logger.debug(
            "Device code issued (interval={}s, expires_in={}s)",
            self._device_code.interval,
            self._device_code.expires_in,
        )
        return self._device_code

    def _check_expiry(self, code: DeviceCode, started_at: float) -> None:
        if self._clock() - started_at >= code.expires_in:
            self._state = DeviceFlowState.EXPIRED
            raise DeviceFlowTimeoutError(code.expires_in)

    async def poll(self) -> str:
        """Poll the token endpoint until the flow reaches a terminal state.

        Returns:
            The access token

        Raises:
            DeviceFlowTimeoutError: ``expires_in`` elapsed before a token was issued
            DeviceFlowExpiredError: The server reported ``expired_token``
            DeviceFlowDeniedError: The user denied the request
            DeviceFlowError: Any other error reported by the server, or
                             poll() called outside the polling state
        """
        code = self._device_code
        started_at = self._started_at
        if self._state != DeviceFlowState.POLLING or code is None or started_at is None:
            raise DeviceFlowError(f"Cannot poll in state {self._state}")

        interval = code.interval
        while True:
            self._check_expiry(code, started_at)
            await self._sleep(interval)
            self._check_expiry(code, started_at)

            payload = await self._post_form(
                ACCESS_TOKEN_URL,
                {
                    "client_id": self._client_id,
                    "device_code": code.device_code,
                    "grant_type": DEVICE_GRANT_TYPE,
                },
            )
            result = TokenResponse.model_validate(payload)

            if result.access_token:
                self._state = DeviceFlowState.AUTHORIZED
                logger.info("Device authorization granted")
                return result.access_token

            if result.error is None:
                self._state = DeviceFlowState.FAILED
                raise DeviceFlowError(
                    f"Authorization failed: {result.error_description or 'empty response'}"
                )

            match DeviceFlowErrorCode.parse(result.error):
                case DeviceFlowErrorCode.AUTHORIZATION_PENDING:
                    continue
                case DeviceFlowErrorCode.SLOW_DOWN:
                    interval += SLOW_DOWN_INCREMENT
                    logger.debug("Server asked to slow down, polling every {}s", interval)
                    continue
                case DeviceFlowErrorCode.EXPIRED_TOKEN:
                    self._state = DeviceFlowState.EXPIRED
                    raise DeviceFlowExpiredError(
                        "Device code expired. Please restart authorization."
                    )
                case DeviceFlowErrorCode.ACCESS_DENIED:
                    self._state = DeviceFlowState.DENIED
                    raise DeviceFlowDeniedError("Authorization denied on GitHub device flow.")
                case DeviceFlowErrorCode.UNRECOGNIZED:
                    self._state = DeviceFlowState.FAILED
                    raise DeviceFlowError(f"Authorization failed: {result.error}")

    async def authorize(self, on_code: Callable[[DeviceCode], None] | None = None) -> str:
        """Run the whole flow: start, show the code, poll.

        Args:
            on_code: Called with the device code before polling starts

        Returns:
            The access token
        """
        code = await self.start()
        if on_code is not None:
            on_code(code)
        return await self.poll()
