"""SEMP v1 Client - password changes over XML/HTTP."""
import logging
import xml.etree.ElementTree as ET
from typing import Optional

import httpx

from rotator.core.config import settings
from rotator.domain.errors import ProtocolFailure, TransportFailure
from rotator.domain.models import Target
from rotator.domain.secrets.ports import PasswordChanger

logger = logging.getLogger(__name__)

SEMP_PATH = "/SEMP"
SUCCESS_CODE = "ok"

# NOTE: element names follow the SEMP v1 <username><change-password> shape
# but have not been checked against a device schema. Validate against the
# target platform's SEMP reference before relying on them in production.

_XML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&apos;",
    "\t": "&#x9;",
    "\n": "&#xA;",
    "\r": "&#xD;",
}


def escape_xml(value: str) -> str:
    """Escape text for use in element content or a double-quoted attribute."""
    return "".join(_XML_ESCAPES.get(ch, ch) for ch in value)


def build_change_password_xml(semp_version: Optional[str], username: str, password: str) -> str:
    if semp_version:
        head = f'<rpc semp-version="{escape_xml(semp_version)}">'
    else:
        head = "<rpc>"
    return (
        f"{head}<username><name>{escape_xml(username)}</name>"
        f"<change-password><password>{escape_xml(password)}</password></change-password>"
        f"</username></rpc>"
    )


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_reply(body: bytes) -> None:
    """Raise ProtocolFailure unless ``body`` is an rpc-reply with code="ok"."""
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise ProtocolFailure("SEMP reply could not be parsed", detail=f"parsing SEMP response: {e}")

    # Element names are matched in any namespace.
    if _local_name(root.tag) != "rpc-reply":
        raise ProtocolFailure("unexpected SEMP reply", detail=f"unexpected root element <{root.tag}>")

    result = root.find("{*}execute-result")
    code = result.get("code") if result is not None else None
    if code == SUCCESS_CODE:
        return

    parse_error = root.findtext("{*}parse-error")
    detail = (parse_error or "").strip() or f"execute-result code={code!r}"
    raise ProtocolFailure("SEMP command failed", detail=f"SEMP command failed: {detail}")


class SempClient(PasswordChanger):
    """Changes CLI user passwords through a device's SEMP v1 endpoint."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_response_bytes: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout if timeout is not None else settings.SEMP_TIMEOUT_SECONDS
        self.max_response_bytes = max_response_bytes or settings.SEMP_MAX_RESPONSE_BYTES
        self._transport = transport

    def _client(self, target: Target) -> httpx.AsyncClient:
        # Redirects are never followed; see change_password.
        return httpx.AsyncClient(
            timeout=self.timeout,
            verify=not target.tls_skip_verify,
            follow_redirects=False,
            transport=self._transport,
        )

    async def change_password(self, target: Target, remote_username: str, new_password: str) -> None:
        body = build_change_password_xml(target.semp_version, remote_username, new_password)
        url = f"{target.url.rstrip('/')}{SEMP_PATH}"

        try:
            async with self._client(target) as client:
                async with client.stream(
                    "POST",
                    url,
                    content=body.encode("utf-8"),
                    headers={"Content-Type": "application/xml"},
                    auth=httpx.BasicAuth(target.admin_username, target.admin_password),
                ) as response:
                    status = response.status_code
                    redirect = 300 <= status < 400
                    location = response.headers.get("location", "")
                    payload = await self._read_capped(response)
        except httpx.TimeoutException as e:
            raise TransportFailure("SEMP request timed out", detail=f"SEMP request to {url} timed out: {e!r}")
        except httpx.InvalidURL as e:
            raise TransportFailure("SEMP target URL is invalid", detail=f"SEMP target URL {url!r} is invalid: {e!r}")
        except httpx.HTTPError as e:
            raise TransportFailure("SEMP request failed", detail=f"SEMP request to {url} failed: {e!r}")

        if redirect:
            raise TransportFailure(
                "SEMP endpoint answered with a redirect",
                detail=f"SEMP returned HTTP {status} redirect to {location!r}; redirects are refused",
            )
        if not 200 <= status < 300:
            text = payload.decode("utf-8", errors="replace")
            raise ProtocolFailure(f"SEMP returned HTTP {status}", detail=f"SEMP returned HTTP {status}: {text}")

        parse_reply(payload)
        logger.debug(f"SEMP password change accepted: url={url} remote_username={remote_username}")

    async def _read_capped(self, response: httpx.Response) -> bytes:
        chunks = []
        size = 0
        async for chunk in response.aiter_bytes():
            remaining = self.max_response_bytes - size
            if remaining <= 0:
                break
            chunks.append(chunk[:remaining])
            size += len(chunks[-1])
        return b"".join(chunks)
