import logging
from typing import Any
from urllib.parse import quote

import httpx

from hackhub.core.config import settings

logger = logging.getLogger(__name__)


class AtlasApiError(Exception):
    def __init__(self, status_code: int | None, detail: str, error_code: str | None = None):
        self.status_code = status_code
        self.detail = detail
        self.error_code = error_code
        super().__init__(f"Atlas API error {status_code}: {detail}")


class AtlasNotConfiguredError(RuntimeError):
    pass


class AtlasClient:
    """Async client for the subset of the Atlas Admin API v2 used for team clusters."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        public_key: str | None = None,
        private_key: str | None = None,
        org_id: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        public_key = public_key or settings.ATLAS_PUBLIC_KEY
        private_key = private_key or settings.ATLAS_PRIVATE_KEY
        self.org_id = org_id or settings.ATLAS_ORG_ID
        if not (public_key and private_key and self.org_id):
            raise AtlasNotConfiguredError("Atlas API credentials are not configured")

        self._client = httpx.AsyncClient(
            base_url=base_url or settings.ATLAS_BASE_URL,
            auth=httpx.DigestAuth(public_key, private_key),
            headers={
                "Accept": f"application/vnd.atlas.{settings.ATLAS_API_VERSION}+json",
                "Content-Type": "application/json",
            },
            timeout=settings.ATLAS_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AtlasClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, body: Any = None) -> Any:
        try:
            response = await self._client.request(method, path, json=body)
        except httpx.HTTPError as exc:
            logger.error("Atlas %s %s failed: %s", method, path, exc)
            raise AtlasApiError(None, f"Atlas API request failed: {exc}") from exc

        if response.is_error:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            detail = payload.get("detail") or payload.get("reason") or response.reason_phrase or "Unknown"
            logger.warning("Atlas %s %s returned %s: %s", method, path, response.status_code, detail)
            raise AtlasApiError(response.status_code, detail, payload.get("errorCode"))

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # Projects

    async def create_project(self, name: str) -> dict:
        return await self._request("POST", "/groups", {"name": name, "orgId": self.org_id})

    async def delete_project(self, group_id: str) -> None:
        await self._request("DELETE", f"/groups/{group_id}")

    # Clusters

    async def create_m0_cluster(self, group_id: str, *, name: str, provider: str, region: str) -> dict:
        body = {
            "name": name,
            "clusterType": "REPLICASET",
            "replicationSpecs": [
                {
                    "regionConfigs": [
                        {
                            "providerName": "TENANT",
                            "backingProviderName": provider,
                            "regionName": region,
                            "priority": 7,
                            "electableSpecs": {"instanceSize": "M0"},
                        }
                    ]
                }
            ],
        }
        return await self._request("POST", f"/groups/{group_id}/clusters", body)

    async def get_cluster(self, group_id: str, cluster_name: str) -> dict:
        return await self._request("GET", f"/groups/{group_id}/clusters/{cluster_name}")

    # Database users

    async def create_database_user(
        self, group_id: str, *, username: str, password: str, cluster_name: str
    ) -> dict:
        body = {
            "databaseName": "admin",
            "username": username,
            "password": password,
            "roles": [{"roleName": "readWriteAnyDatabase", "databaseName": "admin"}],
            "scopes": [{"name": cluster_name, "type": "CLUSTER"}],
        }
        return await self._request("POST", f"/groups/{group_id}/databaseUsers", body)

    async def delete_database_user(self, group_id: str, username: str) -> None:
        await self._request("DELETE", f"/groups/{group_id}/databaseUsers/admin/{quote(username, safe='')}")

    # IP access list

    async def add_access_list_entries(self, group_id: str, entries: list[dict]) -> None:
        await self._request("POST", f"/groups/{group_id}/accessList", entries)

    async def delete_access_list_entry(self, group_id: str, entry: str) -> None:
        await self._request("DELETE", f"/groups/{group_id}/accessList/{quote(entry, safe='')}")
