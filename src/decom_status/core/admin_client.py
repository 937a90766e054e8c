"""Admin API client for pool decommission status.

This module queries the cluster administrative API for the status of every
server pool and converts the response into ``PoolDecommissionSnapshot``
values. Requests are signed with AWS Signature Version 4 using the alias
credentials, and sent with aiohttp.

Wire format of ``GET /minio/admin/v3/pools/list`` (one entry per pool)::

    [
      {
        "id": 0,
        "cmdline": "https://node{1...4}/data{1...4}",
        "lastUpdate": "2024-01-01T10:05:00Z",
        "decommissionInfo": {
          "startTime": "2024-01-01T10:00:00Z",
          "startSize": 0,
          "totalSize": 1073741824,
          "currentSize": 229638144,
          "complete": false,
          "failed": false,
          "canceled": false
        }
      }
    ]
"""

import hashlib
import hmac
import json
import logging
import re
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Annotated, Final, Self
from urllib.parse import parse_qsl, quote, urlsplit

import aiohttp
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from decom_status.core.alias_store import AliasConfig
from decom_status.types.models import PoolDecommissionSnapshot

__all__ = [
    "POOLS_LIST_PATH",
    "AdminAPIError",
    "AdminClient",
    "DecommissionInfoPayload",
    "PoolStatusPayload",
    "parse_pools_status",
    "sign_request",
]

logger = logging.getLogger(__name__)

ADMIN_API_PREFIX: Final[str] = "/minio/admin/v3"
POOLS_LIST_PATH: Final[str] = f"{ADMIN_API_PREFIX}/pools/list"

SIGNING_ALGORITHM: Final[str] = "AWS4-HMAC-SHA256"
SIGNING_SERVICE: Final[str] = "s3"
EMPTY_PAYLOAD_SHA256: Final[str] = hashlib.sha256(b"").hexdigest()

# Characters left unescaped in canonical URIs and query strings
_UNRESERVED: Final[str] = "-_.~"

# The admin API emits up to nanosecond precision; datetime holds microseconds
_FRACTIONAL_SECONDS = re.compile(r"(\.\d{6})\d+")

# Longest error body excerpt kept in exception messages
_MAX_ERROR_BODY = 200


class AdminAPIError(RuntimeError):
    """Raised when the pool status query fails.

    Attributes:
        status: HTTP status code, or None for transport failures
    """

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status: int | None = status


class DecommissionInfoPayload(BaseModel):
    """Decommission counters of one pool as reported by the admin API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    start_time: Annotated[datetime | None, Field(alias="startTime")] = None
    start_size: Annotated[int, Field(alias="startSize")] = 0
    total_size: Annotated[int, Field(alias="totalSize")] = 0
    current_size: Annotated[int, Field(alias="currentSize")] = 0
    complete: bool = False
    failed: bool = False
    canceled: bool = False

    @field_validator("start_time", mode="wrap")
    @classmethod
    def parse_start_time(cls, v: object, handler: ValidatorFunctionWrapHandler) -> datetime | None:
        """Parse an RFC 3339 start time leniently.

        Sub-microsecond digits are dropped and timestamps without an offset
        are taken as UTC. A value that cannot be parsed becomes None so the
        pool is reported as not started instead of failing the whole response.
        """
        if isinstance(v, str):
            v = _FRACTIONAL_SECONDS.sub(r"\1", v)
        try:
            parsed: datetime | None = handler(v)
        except ValidationError:
            logger.debug("Ignoring unparseable decommission start time", extra={"value": repr(v)})
            return None
        if parsed is not None and parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed


class PoolStatusPayload(BaseModel):
    """Status entry of one server pool as reported by the admin API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    cmdline: str = ""
    decommission: Annotated[DecommissionInfoPayload | None, Field(alias="decommissionInfo")] = None

    def to_snapshot(self) -> PoolDecommissionSnapshot:
        """Convert the wire entry into a snapshot for the calculator.

        Pools without decommission information become not-started snapshots.
        """
        info = self.decommission or DecommissionInfoPayload()
        return PoolDecommissionSnapshot(
            pool_id=self.id,
            command_line=self.cmdline,
            start_time=info.start_time,
            total_size=info.total_size,
            start_size=info.start_size,
            current_size=info.current_size,
            complete=info.complete,
            failed=info.failed,
            canceled=info.canceled,
        )


_POOL_LIST_ADAPTER: TypeAdapter[list[PoolStatusPayload] | None] = TypeAdapter(list[PoolStatusPayload] | None)


def parse_pools_status(body: str | bytes) -> list[PoolDecommissionSnapshot]:
    """Parse a pools list response body into snapshots.

    Args:
        body: Raw JSON response body

    Returns:
        One snapshot per pool, in response order (empty for ``null``)

    Raises:
        AdminAPIError: If the body is not a valid pools list
    """
    try:
        pools = _POOL_LIST_ADAPTER.validate_json(body)
    except ValidationError as e:
        msg = f"Malformed pool status response: {e.error_count()} validation error(s)"
        raise AdminAPIError(msg) from e

    return [pool.to_snapshot() for pool in pools or []]


def _hmac_sha256(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def _canonical_query(query: str) -> str:
    pairs = parse_qsl(query, keep_blank_values=True)
    encoded = sorted((quote(k, safe=_UNRESERVED), quote(v, safe=_UNRESERVED)) for k, v in pairs)
    return "&".join(f"{k}={v}" for k, v in encoded)


def sign_request(
    *,
    method: str,
    url: str,
    access_key: str,
    secret_key: str,
    region: str,
    now: datetime,
    payload_sha256: str = EMPTY_PAYLOAD_SHA256,
) -> dict[str, str]:
    """Build AWS Signature Version 4 headers for a request.

    Args:
        method: HTTP method
        url: Absolute request URL
        access_key: Alias access key
        secret_key: Alias secret key
        region: Signing region
        now: Signing instant (converted to UTC)
        payload_sha256: Hex SHA-256 of the request body

    Returns:
        Headers to send: Host, X-Amz-Date, X-Amz-Content-Sha256, Authorization
    """
    parts = urlsplit(url)
    host = parts.netloc
    signing_time = now.astimezone(UTC)
    amz_date = signing_time.strftime("%Y%m%dT%H%M%SZ")
    date_stamp = signing_time.strftime("%Y%m%d")

    signed = {
        "host": host,
        "x-amz-content-sha256": payload_sha256,
        "x-amz-date": amz_date,
    }
    signed_headers = ";".join(sorted(signed))
    canonical_headers = "".join(f"{name}:{signed[name]}\n" for name in sorted(signed))

    canonical_request = "\n".join(
        [
            method.upper(),
            quote(parts.path or "/", safe="/" + _UNRESERVED),
            _canonical_query(parts.query),
            canonical_headers,
            signed_headers,
            payload_sha256,
        ]
    )

    scope = f"{date_stamp}/{region}/{SIGNING_SERVICE}/aws4_request"
    string_to_sign = "\n".join(
        [
            SIGNING_ALGORITHM,
            amz_date,
            scope,
            hashlib.sha256(canonical_request.encode("utf-8")).hexdigest(),
        ]
    )

    signing_key = _hmac_sha256(("AWS4" + secret_key).encode("utf-8"), date_stamp)
    signing_key = _hmac_sha256(signing_key, region)
    signing_key = _hmac_sha256(signing_key, SIGNING_SERVICE)
    signing_key = _hmac_sha256(signing_key, "aws4_request")
    signature = hmac.new(signing_key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

    return {
        "Host": host,
        "X-Amz-Date": amz_date,
        "X-Amz-Content-Sha256": payload_sha256,
        "Authorization": (
            f"{SIGNING_ALGORITHM} Credential={access_key}/{scope}, "
            f"SignedHeaders={signed_headers}, Signature={signature}"
        ),
    }


def _error_detail(body: str) -> str:
    """Extract a readable message from an admin API error body."""
    try:
        payload: object = json.loads(body)  # pyright: ignore[reportAny]  # JSON boundary
    except ValueError:
        return body.strip()[:_MAX_ERROR_BODY] or "empty response body"

    if isinstance(payload, dict):
        message = payload.get("Message") or payload.get("Code")  # pyright: ignore[reportUnknownMemberType]
        if isinstance(message, str) and message:
            return message
    return body.strip()[:_MAX_ERROR_BODY]


def _utc_now() -> datetime:
    return datetime.now(UTC)


class AdminClient:
    """Async admin API client bound to one cluster alias.

    Implements the SnapshotSource Protocol. The aiohttp session is created
    when entering the async context and closed on exit.

    Example:
        >>> async with AdminClient(load_alias("prod")) as client:
        ...     snapshots = await client.list_pools_status()
    """

    def __init__(
        self,
        alias: AliasConfig,
        *,
        timeout_seconds: float = 10.0,
        verify_tls: bool = False,
        region: str = "us-east-1",
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize the client.

        Args:
            alias: Connection details of the cluster alias
            timeout_seconds: Total timeout for one request (default: 10.0)
            verify_tls: Verify TLS certificates of https endpoints (default: False)
            region: Signing region (default: us-east-1)
            clock: Source of signing timestamps
        """
        self._alias: AliasConfig = alias
        self._timeout_seconds: float = timeout_seconds
        self._verify_tls: bool = verify_tls
        self._region: str = region
        self._clock: Callable[[], datetime] = clock
        self._session: aiohttp.ClientSession | None = None

    @property
    def base_url(self) -> str:
        """Return the alias endpoint without a trailing slash."""
        return self._alias.url.rstrip("/")

    async def __aenter__(self) -> Self:
        timeout = aiohttp.ClientTimeout(total=self._timeout_seconds)
        # ssl=False skips certificate verification for self-signed clusters
        connector = aiohttp.TCPConnector(ssl=self._verify_tls)
        self._session = aiohttp.ClientSession(timeout=timeout, connector=connector)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def list_pools_status(self) -> list[PoolDecommissionSnapshot]:
        """Fetch the decommission status of every pool.

        Returns:
            One snapshot per pool, in cluster order

        Raises:
            RuntimeError: If called outside the async context
            AdminAPIError: On transport failure, non-200 status or malformed body
        """
        if self._session is None:
            msg = "HTTP session not initialized; use 'async with AdminClient(...)'"
            raise RuntimeError(msg)

        url = f"{self.base_url}{POOLS_LIST_PATH}"
        headers = sign_request(
            method="GET",
            url=url,
            access_key=self._alias.access_key,
            secret_key=self._alias.secret_key.get_secret_value(),
            region=self._region,
            now=self._clock(),
        )

        logger.debug("Querying pool status", extra={"url": url})

        try:
            async with self._session.get(url, headers=headers) as response:
                status = response.status
                body = await response.text()
        except TimeoutError as e:
            msg = f"Timed out after {self._timeout_seconds:g}s waiting for {self.base_url}"
            raise AdminAPIError(msg) from e
        except aiohttp.ClientError as e:
            msg = f"Request to {self.base_url} failed: {e}"
            raise AdminAPIError(msg) from e

        if status != 200:
            msg = f"Admin API returned HTTP {status}: {_error_detail(body)}"
            raise AdminAPIError(msg, status=status)

        snapshots = parse_pools_status(body)
        logger.info("Fetched pool status", extra={"pools": len(snapshots)})
        return snapshots
