import logging

import httpx

from ..core.errors import NetworkFailure, RejectedWrite
from ..core.model import DocumentSnapshot
from ..core.ports import DocumentWriter

log = logging.getLogger(__name__)

EDIT_PATH = "/edit"


class HttpDocumentWriter(DocumentWriter):
    """Sends document snapshots to the wiki server's edit endpoint."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=base_url, timeout=timeout, headers=headers
        )

    async def write(self, snapshot: DocumentSnapshot) -> int:
        try:
            resp = await self.client.post(EDIT_PATH, json=snapshot.to_dict())
        except httpx.HTTPError as exc:
            raise NetworkFailure(str(exc) or exc.__class__.__name__) from exc

        if resp.status_code >= 400:
            raise RejectedWrite(resp.status_code, resp.text)
        log.debug("POST %s -> %s", EDIT_PATH, resp.status_code)
        return resp.status_code

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
