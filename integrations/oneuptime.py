"""OneUptime API client: reference data, incident creation and lookup."""
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional
import httpx
from core.logging import get_logger
from integrations.base import ApiError, BaseApiClient
from integrations.hook_settings import OneUptimeConfigProvider
from integrations.models import CreatedIncident, Incident, IncidentState, ListEnvelope, OnCallPolicy, Severity

logger = get_logger(__name__)

LIST_LIMIT = 50


class OneUptimeClient(BaseApiClient):
    """Client for the OneUptime REST API, scoped to a single project."""

    service_name = "OneUptime"

    def __init__(
        self,
        config_provider: OneUptimeConfigProvider,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize OneUptime client.

        Args:
            config_provider: Supplies base URL, project ID and API key on every call
            timeout: Per-request timeout in seconds
            client: Optional preconfigured AsyncClient
        """
        super().__init__(timeout=timeout, client=client)
        self.config_provider = config_provider

    async def _api(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        config = await self.config_provider.get_config()
        return await self._request(
            method,
            f"{config.base_url}/api{path}",
            path,
            headers={
                "Content-Type": "application/json",
                "ApiKey": config.api_key,
            },
            json=json,
            params=params
        )

    async def project_id(self) -> str:
        return (await self.config_provider.get_config()).project_id

    async def incident_url(self, incident_id: str) -> str:
        """Dashboard link for an incident."""
        return (await self.config_provider.get_config()).incident_url(incident_id)

    async def _get_list(
        self,
        resource: str,
        select: Dict[str, bool],
        sort: Dict[str, int]
    ) -> List[Dict[str, Any]]:
        project_id = await self.project_id()
        path = f"/{resource}/get-list"
        result = await self._api(
            "POST",
            path,
            json={
                "select": select,
                "query": {"projectId": project_id},
                "sort": sort,
            },
            params={"limit": LIST_LIMIT}
        )
        return self._parse(ListEnvelope, result, "POST", path).data

    async def list_severities(self) -> List[Severity]:
        """Incident severities in ascending `order`."""
        rows = await self._get_list(
            "incident-severity",
            select={"name": True, "color": True, "order": True, "projectId": True},
            sort={"order": 1}
        )
        return [self._parse(Severity, row, "POST", "/incident-severity/get-list") for row in rows]

    async def list_states(self) -> List[IncidentState]:
        """Incident states in ascending `order`."""
        rows = await self._get_list(
            "incident-state",
            select={
                "name": True,
                "isCreatedState": True,
                "isAcknowledgedState": True,
                "isResolvedState": True,
                "color": True,
                "order": True,
                "projectId": True,
            },
            sort={"order": 1}
        )
        return [self._parse(IncidentState, row, "POST", "/incident-state/get-list") for row in rows]

    async def list_policies(self) -> List[OnCallPolicy]:
        """On-call duty policies, newest first."""
        rows = await self._get_list(
            "on-call-duty-policy",
            select={"name": True, "description": True, "projectId": True},
            sort={"createdAt": -1}
        )
        return [self._parse(OnCallPolicy, row, "POST", "/on-call-duty-policy/get-list") for row in rows]

    async def create_incident(
        self,
        title: str,
        description: str,
        severity_id: str,
        state_id: str,
        policy_ids: Optional[List[str]] = None
    ) -> Incident:
        """
        Create an incident in the configured project.

        Args:
            title: Incident title
            description: Markdown description
            severity_id: Incident severity ID
            state_id: Initial incident state ID
            policy_ids: On-call duty policies to page (omitted when empty)

        Returns:
            The created incident (its `id` is always set)
        """
        data: Dict[str, Any] = {
            "projectId": await self.project_id(),
            "title": title,
            "description": description,
            "incidentSeverityId": severity_id,
            "currentIncidentStateId": state_id,
            "declaredAt": datetime.now(UTC).isoformat(),
        }
        if policy_ids:
            data["onCallDutyPolicies"] = policy_ids

        result = await self._api("POST", "/incident", json={"data": data})
        incident = self._parse(CreatedIncident, result, "POST", "/incident").unwrap()
        if not incident.id:
            raise ApiError(self.service_name, "POST", "/incident", reason="response carried no incident id")
        logger.info("OneUptime incident created", incident_id=incident.id, title=title)
        return incident

    async def get_incident(self, incident_id: str) -> Incident:
        """Fetch an incident's current state and severity."""
        path = f"/incident/{incident_id}/get-item"
        result = await self._api(
            "POST",
            path,
            json={
                "select": {
                    "title": True,
                    "currentIncidentStateId": True,
                    "incidentSeverityId": True,
                    "slug": True,
                    "projectId": True,
                    "incidentNumber": True,
                    "incidentNumberWithPrefix": True,
                }
            }
        )
        return self._parse(Incident, result, "POST", path)
