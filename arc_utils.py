"""
Utility module for the CData Arc MCP server.
Contains the Admin API client, OData query helpers, field alias tables and text formatting helpers.
"""
from typing import Dict, Any, List, Optional, Tuple, Mapping
import asyncio
import datetime
import functools
import logging
import re
import urllib.parse
import requests
from requests.auth import HTTPBasicAuth
from fuzzywuzzy import fuzz, process


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8181/api.rsc"
DEFAULT_TIMEOUT = 30

DATETIME_QUOTED = "quoted"
DATETIME_BARE = "bare"
DATETIME_STYLES = (DATETIME_QUOTED, DATETIME_BARE)

# Order in which OData options are emitted
_QUERY_OPTIONS = ("select", "filter", "orderby", "top", "skip")


#######################
## OData query helpers

def build_query_string(options: Optional[Mapping[str, Any]] = None) -> str:
    """Build an OData query string from the recognized query options.

    Args:
        options: Mapping with any of select, filter, orderby, top, skip

    Returns:
        "?$filter=...&$top=..." or an empty string when no option is set
    """
    if not options:
        return ""
    parts = []
    for name in _QUERY_OPTIONS:
        value = options.get(name)
        if value is None or value == "":
            continue
        parts.append(f"${name}={urllib.parse.quote(str(value), safe='')}")
    if not parts:
        return ""
    return "?" + "&".join(parts)


def odata_key(value: str) -> str:
    """Quote a key value as an OData string literal."""
    return "'" + str(value).replace("'", "''") + "'"


def odata_literal(value: str) -> str:
    """Escape a value for use inside a quoted literal of a filter expression."""
    return str(value).replace("'", "''")


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def iso_timestamp(moment: datetime.datetime) -> str:
    """Render a datetime as ISO-8601 UTC with milliseconds and a Z suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=datetime.timezone.utc)
    moment = moment.astimezone(datetime.timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def cutoff_timestamp(hours: float, now: Optional[datetime.datetime] = None) -> str:
    """Return the ISO timestamp for "now minus the given number of hours"."""
    now = now or utc_now()
    return iso_timestamp(now - datetime.timedelta(hours=hours))


def since_filter(field: str, hours: float, style: str = DATETIME_QUOTED,
                 now: Optional[datetime.datetime] = None) -> str:
    """Build an OData "field ge <cutoff>" clause for a relative time window.

    Args:
        field: Timestamp field of the resource (Timestamp, TimeCreated, ...)
        hours: Size of the window in hours
        style: "quoted" for Timestamp ge '<iso>', "bare" for Timestamp ge <iso>
        now: Reference time, defaults to the current UTC time

    Returns:
        The filter clause
    """
    cutoff = cutoff_timestamp(hours, now or utc_now())
    if style == DATETIME_BARE:
        return f"{field} ge {cutoff}"
    return f"{field} ge '{cutoff}'"


def join_filters(*clauses: Optional[str]) -> Optional[str]:
    """Conjoin the non-empty clauses with "and"."""
    present = [clause for clause in clauses if clause]
    if not present:
        return None
    return " and ".join(present)


def parse_count(text: Optional[str]) -> int:
    """Parse a plain-text $count body, falling back to 0."""
    match = re.match(r"\s*(-?\d+)", text or "")
    return int(match.group(1)) if match else 0


#######################
## Errors

class ArcAPIError(Exception):
    """Raised for any failed call to the Arc Admin API.

    status_code is None for transport failures (connection refused, timeout).
    code and message carry the structured upstream error body when present.
    """

    def __init__(self, message: str, status_code: Optional[int] = None,
                 reason: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.reason = reason
        self.code = code

    @property
    def is_structured(self) -> bool:
        return self.code is not None

    @classmethod
    def from_response(cls, response: requests.Response) -> "ArcAPIError":
        code = None
        message = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            code = body["error"].get("code")
            message = body["error"].get("message")
        if not message:
            message = f"HTTP {response.status_code}: {response.reason}"
        return cls(message, status_code=response.status_code, reason=response.reason, code=code)


#######################
## API client

class ArcAPIClient:
    """Encapsulated client for the CData Arc Admin API.

    The session is configured once and never mutated afterwards, so one
    instance can be shared by overlapping tool calls. Blocking requests run
    in the default executor.
    """

    datetime_style = DATETIME_QUOTED

    def __init__(self, base_url: Optional[str] = None, auth_token: Optional[str] = None,
                 timeout: float = DEFAULT_TIMEOUT, datetime_style: str = DATETIME_QUOTED):
        if datetime_style not in DATETIME_STYLES:
            raise ValueError(f"Unknown datetime style '{datetime_style}', expected one of {DATETIME_STYLES}")
        self._base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._timeout = timeout
        self.datetime_style = datetime_style
        self._auth_configured = bool(auth_token)
        self._session = requests.Session()
        self._session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json"
        })
        if auth_token and ":" in auth_token:
            username, password = auth_token.split(":", 1)
            self._session.auth = HTTPBasicAuth(username, password)
        elif auth_token:
            self._session.headers["x-cdata-authtoken"] = auth_token

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def auth_configured(self) -> bool:
        return self._auth_configured

    def close(self) -> None:
        self._session.close()

    # Transport

    def _send(self, method: str, path: str, body: Optional[Any] = None,
              accept: Optional[str] = None) -> requests.Response:
        url = f"{self._base_url}{path}"
        headers = {"Accept": accept} if accept else None
        logger.info("[Arc API] %s %s", method, path)
        try:
            response = self._session.request(method, url, json=body, headers=headers, timeout=self._timeout)
        except requests.exceptions.RequestException as e:
            logger.error("[Arc API Error] %s %s: %s", method, path, e)
            raise ArcAPIError(str(e)) from e
        if not response.ok:
            logger.error("[Arc API Error] %s %s -> %s %s", method, path, response.status_code, response.reason)
            raise ArcAPIError.from_response(response)
        return response

    async def _request(self, method: str, path: str, body: Optional[Any] = None,
                       accept: Optional[str] = None) -> requests.Response:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(self._send, method, path, body, accept))

    async def _json(self, method: str, path: str, body: Optional[Any] = None) -> Any:
        response = await self._request(method, path, body)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def _text(self, path: str) -> str:
        response = await self._request("GET", path, accept="text/plain; charset=utf-8")
        return response.text

    # Generic verbs

    async def _list(self, resource: str, query: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        data = await self._json("GET", f"/{resource}{build_query_string(query)}")
        if isinstance(data, dict) and isinstance(data.get("value"), list):
            return data["value"]
        return []

    async def _get(self, entity_path: str) -> Optional[Dict[str, Any]]:
        try:
            return await self._json("GET", f"/{entity_path}")
        except ArcAPIError as e:
            if e.status_code == 404:
                return None
            raise

    async def _create(self, resource: str, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self._json("POST", f"/{resource}", body) or {}

    async def _update(self, entity_path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self._json("PUT", f"/{entity_path}", body) or {}

    async def _delete(self, entity_path: str) -> None:
        await self._request("DELETE", f"/{entity_path}")

    async def _count(self, resource: str, query: Optional[Mapping[str, Any]] = None) -> int:
        text = await self._text(f"/{resource}/$count{build_query_string(query)}")
        return parse_count(text)

    async def _property(self, entity_path: str, property_name: str) -> Optional[str]:
        try:
            return await self._text(f"/{entity_path}/{urllib.parse.quote(property_name, safe='')}/$value")
        except ArcAPIError as e:
            if e.status_code == 404:
                return None
            raise

    async def _action(self, action: str, params: Optional[Dict[str, Any]] = None) -> Any:
        body = {k: v for k, v in (params or {}).items() if v is not None and v != ""}
        return await self._json("POST", f"/{action}", body)

    @staticmethod
    def _entity(resource: str, key: str) -> str:
        return f"{resource}({odata_key(key)})"

    @staticmethod
    def _file_entity(connector_id: str, folder: str, filename: str, message_id: str) -> str:
        return (f"files(ConnectorId={odata_key(connector_id)},Folder={odata_key(folder)},"
                f"Filename={odata_key(filename)},MessageId={odata_key(message_id)})")

    # Connectors

    async def list_connectors(self, query: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        return await self._list("connectors", query)

    async def get_connector(self, connector_id: str) -> Optional[Dict[str, Any]]:
        return await self._get(self._entity("connectors", connector_id))

    async def create_connector(self, connector: Dict[str, Any]) -> Dict[str, Any]:
        return await self._create("connectors", connector)

    async def update_connector(self, connector_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return await self._update(self._entity("connectors", connector_id), changes)

    async def delete_connector(self, connector_id: str) -> None:
        await self._delete(self._entity("connectors", connector_id))

    # Files

    async def list_files(self, query: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        return await self._list("files", query)

    async def get_file(self, connector_id: str, folder: str, filename: str,
                       message_id: str) -> Optional[Dict[str, Any]]:
        return await self._get(self._file_entity(connector_id, folder, filename, message_id))

    async def create_file(self, file: Dict[str, Any]) -> Dict[str, Any]:
        return await self._create("files", file)

    async def update_file(self, connector_id: str, folder: str, filename: str, message_id: str,
                          changes: Dict[str, Any]) -> Dict[str, Any]:
        return await self._update(self._file_entity(connector_id, folder, filename, message_id), changes)

    async def delete_file(self, connector_id: str, folder: str, filename: str, message_id: str) -> None:
        await self._delete(self._file_entity(connector_id, folder, filename, message_id))

    # Transactions

    async def list_transactions(self, query: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        return await self._list("transactions", query)

    async def get_transaction(self, transaction_id: str) -> Optional[Dict[str, Any]]:
        return await self._get(self._entity("transactions", transaction_id))

    async def delete_transaction(self, transaction_id: str) -> None:
        await self._delete(self._entity("transactions", transaction_id))

    async def count_transactions(self, query: Optional[Mapping[str, Any]] = None) -> int:
        return await self._count("transactions", query)

    async def get_transaction_property(self, transaction_id: str, property_name: str) -> Optional[str]:
        return await self._property(self._entity("transactions", transaction_id), property_name)

    # Logs

    async def list_logs(self, query: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        return await self._list("logs", query)

    async def get_log(self, log_id: str) -> Optional[Dict[str, Any]]:
        return await self._get(self._entity("logs", log_id))

    async def delete_log(self, log_id: str) -> None:
        await self._delete(self._entity("logs", log_id))

    # Profile

    async def get_profile(self) -> List[Dict[str, Any]]:
        """The profile is a singleton; it is returned as a one element list like the other resources."""
        profile = await self._json("GET", "/profile")
        return [profile] if isinstance(profile, dict) else []

    async def update_profile(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        body = {"@odata.type": "CDataAPI.Profile", **changes}
        return await self._json("PUT", "/profile", body) or {}

    # Workspaces

    async def list_workspaces(self, query: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        return await self._list("workspaces", query)

    async def get_workspace(self, workspace_id: str) -> Optional[Dict[str, Any]]:
        return await self._get(self._entity("workspaces", workspace_id))

    async def create_workspace(self, workspace: Dict[str, Any]) -> Dict[str, Any]:
        return await self._create("workspaces", workspace)

    async def update_workspace(self, workspace_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return await self._update(self._entity("workspaces", workspace_id), changes)

    async def delete_workspace(self, workspace_id: str) -> None:
        await self._delete(self._entity("workspaces", workspace_id))

    async def count_workspaces(self, query: Optional[Mapping[str, Any]] = None) -> int:
        return await self._count("workspaces", query)

    async def get_workspace_property(self, workspace_id: str, property_name: str) -> Optional[str]:
        return await self._property(self._entity("workspaces", workspace_id), property_name)

    # Vault

    async def list_vault_entries(self, query: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        return await self._list("vault", query)

    async def get_vault_entry(self, vault_id: str) -> Optional[Dict[str, Any]]:
        return await self._get(self._entity("vault", vault_id))

    async def create_vault_entry(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        return await self._create("vault", entry)

    async def update_vault_entry(self, vault_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        body = {"@odata.type": "CDataAPI.Vault", **changes}
        return await self._update(self._entity("vault", vault_id), body)

    async def delete_vault_entry(self, vault_id: str) -> None:
        await self._delete(self._entity("vault", vault_id))

    async def count_vault_entries(self, query: Optional[Mapping[str, Any]] = None) -> int:
        return await self._count("vault", query)

    async def get_vault_property(self, vault_id: str, property_name: str) -> Optional[str]:
        return await self._property(self._entity("vault", vault_id), property_name)

    # Certificates

    async def list_certificates(self, query: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        return await self._list("certificates", query)

    async def get_certificate(self, name: str) -> Optional[Dict[str, Any]]:
        return await self._get(self._entity("certificates", name))

    async def create_certificate(self, certificate: Dict[str, Any]) -> Dict[str, Any]:
        return await self._create("certificates", certificate)

    async def delete_certificate(self, name: str) -> None:
        await self._delete(self._entity("certificates", name))

    # Reports

    async def list_reports(self, query: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        return await self._list("reports", query)

    async def get_report(self, name: str) -> Optional[Dict[str, Any]]:
        return await self._get(self._entity("reports", name))

    async def create_report(self, report: Dict[str, Any]) -> Dict[str, Any]:
        return await self._create("reports", report)

    async def update_report(self, name: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return await self._update(self._entity("reports", name), changes)

    async def delete_report(self, name: str) -> None:
        await self._delete(self._entity("reports", name))

    # Requests

    async def list_requests(self, query: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        return await self._list("requests", query)

    async def get_request(self, request_id: str) -> Optional[Dict[str, Any]]:
        return await self._get(self._entity("requests", request_id))

    async def delete_request(self, request_id: str) -> None:
        await self._delete(self._entity("requests", request_id))

    async def count_requests(self, query: Optional[Mapping[str, Any]] = None) -> int:
        return await self._count("requests", query)

    # Actions

    async def copy_connector(self, params: Dict[str, Any]) -> Any:
        return await self._action("copyConnector", params)

    async def receive_file(self, params: Dict[str, Any]) -> Any:
        return await self._action("receiveFile", params)

    async def send_file(self, params: Dict[str, Any]) -> Any:
        return await self._action("sendFile", params)

    async def set_flow(self, params: Dict[str, Any]) -> Any:
        return await self._action("setFlow", params)

    async def cleanup(self, params: Dict[str, Any]) -> Any:
        return await self._action("cleanup", params)

    async def export_configuration(self, params: Dict[str, Any]) -> Any:
        return await self._action("export", params)

    async def import_configuration(self, params: Dict[str, Any]) -> Any:
        return await self._action("import", params)

    async def exchange_cert(self, params: Dict[str, Any]) -> Any:
        return await self._action("exchangeCert", params)

    async def create_cert(self, params: Dict[str, Any]) -> Any:
        return await self._action("createCert", params)

    async def get_message_count(self, params: Dict[str, Any]) -> Any:
        return await self._action("getMessageCount", params)

    async def get_transaction_logs(self, params: Dict[str, Any]) -> Any:
        return await self._action("getTransactionLogs", params)


def as_records(result: Any) -> List[Dict[str, Any]]:
    """Normalize an action response ({"value": [...]}, a list or a single object) into a list of records."""
    if isinstance(result, dict) and isinstance(result.get("value"), list):
        result = result["value"]
    if isinstance(result, list):
        return [item for item in result if isinstance(item, dict)]
    if isinstance(result, dict) and result:
        return [result]
    return []


#######################
## Field alias tables

# canonical name -> accepted upstream spellings, in lookup order
CONNECTOR_FIELDS = {
    "ConnectorId": ("ConnectorId", "connectorid"),
    "WorkspaceId": ("WorkspaceId", "workspace", "workspaceid", "Workspace"),
    "ConnectorType": ("ConnectorType", "connectortype"),
    "AutomationSend": ("AutomationSend", "automationsend"),
    "AutomationReceive": ("AutomationReceive", "automationreceive"),
    "ReceiveInterval": ("ReceiveInterval", "receiveinterval"),
    "AutomationRetryInterval": ("AutomationRetryInterval", "automationretryinterval"),
    "AutomationMaxAttempts": ("AutomationMaxAttempts", "automationmaxattempts"),
    "MaxWorkers": ("MaxWorkers", "maxworkers"),
    "MaxFiles": ("MaxFiles", "maxfiles"),
    "SendFolder": ("SendFolder", "sendfolder"),
    "ReceiveFolder": ("ReceiveFolder", "receivefolder"),
    "SentFolder": ("SentFolder", "sentfolder"),
    "SaveToSentFolder": ("SaveToSentFolder", "savetosentfolder"),
    "LogLevel": ("LogLevel", "loglevel"),
    "LogMessages": ("LogMessages", "logmessages"),
}

FILE_FIELDS = {
    "ConnectorId": ("ConnectorId", "connectorid"),
    "Folder": ("Folder", "folder"),
    "Filename": ("Filename", "filename"),
    "MessageId": ("MessageId", "messageid"),
    "Subfolder": ("Subfolder", "subfolder"),
    "TimeCreated": ("TimeCreated", "timecreated"),
    "FilePath": ("FilePath", "filepath"),
    "FileSize": ("FileSize", "filesize"),
    "BatchGroupId": ("BatchGroupId", "batchgroupid"),
}

TRANSACTION_FIELDS = {
    "Id": ("Id", "id"),
    "ConnectorId": ("ConnectorId", "connectorid"),
    "WorkspaceId": ("WorkspaceId", "Workspace", "workspaceid"),
    "MessageId": ("MessageId", "messageid"),
    "Direction": ("Direction", "direction"),
    "Status": ("Status", "status"),
    "Filename": ("Filename", "filename"),
    "FilePath": ("FilePath", "filepath"),
    "FileSize": ("FileSize", "filesize"),
    "Timestamp": ("Timestamp", "StartTime", "timestamp"),
    "StartTime": ("StartTime", "starttime"),
    "EndTime": ("EndTime", "endtime"),
    "ProcessingTime": ("ProcessingTime", "processingtime"),
    "MessageCount": ("MessageCount", "messagecount"),
    "ConnectorType": ("ConnectorType", "connectortype"),
}

LOG_FIELDS = {
    "Id": ("Id", "id"),
    "Timestamp": ("Timestamp", "timestamp"),
    "Level": ("Type", "Level", "type", "level"),
    "Message": ("Message", "message"),
    "ConnectorId": ("ConnectorId", "connectorid"),
    "Category": ("Category", "category"),
}

PROFILE_FIELDS = {
    "LogLevel": ("LogLevel", "loglevel"),
    "MaxLogSize": ("MaxLogSize", "maxlogsize"),
    "LogRetentionDays": ("LogRetentionDays", "logretentiondays"),
    "NotifyStopStart": ("NotifyStopStart", "notifystopstart"),
    "SSOEnabled": ("SSOEnabled", "ssoenabled"),
    "SSOEnableJITProvisioning": ("SSOEnableJITProvisioning", "ssoenablejitprovisioning"),
    "SyslogEnable": ("SyslogEnable", "syslogenable"),
    "SysLogSSLEnabled": ("SysLogSSLEnabled", "syslogsslenabled"),
    "SysLogEnabledLogs": ("SysLogEnabledLogs", "syslogenabledlogs"),
}

# Workspaces use lowercase property names; older versions return capitalized ones
WORKSPACE_FIELDS = {
    "WorkspaceId": ("workspaceid", "Workspaceid", "WorkspaceId"),
    "WorkspaceType": ("workspacetype", "WorkspaceType"),
    "Name": ("name", "Name"),
    "Description": ("description", "Description"),
    "CreatedDate": ("createddate", "CreatedDate"),
}
WORKSPACE_FIELDS.update({
    name: (name.lower(), name) for name in (
        "EmailProtocol", "SmtpServer", "SmtpPort", "SmtpUser", "SmtpAuthMechanism", "SmtpSslMode",
        "EmailSendgridUrl", "NotifyEmail", "NotifyEmailTo", "NotifyEmailFrom", "NotifyEmailSubject",
        "S3Bucket", "S3Region", "S3Url", "S3Prefix", "S3AccessKey",
        "ArchiveFolder", "ArchiveDestination", "CleanupSendFolder", "CleanupReceiveFolder",
        "CleanupSentFolder", "CleanupTransactions",
        "MaxWorkersPerPort", "MaxFilesPerPort", "BackoffInterval", "BackoffMinThreshold", "BackoffMaxThreshold",
        "AutoTaskType", "AutoTaskInterval",
        "OverridePerformanceSettings", "OverrideCleanupOptions", "OverrideEmailSettings",
    )
})

VAULT_FIELDS = {
    "Id": ("Id", "id"),
    "Name": ("Name", "name"),
    "Value": ("Value", "value"),
    "Type": ("Type", "type"),
    "ShowType": ("ShowType", "showType", "showtype"),
    "Tags": ("Tags", "tags"),
}

CERTIFICATE_FIELDS = {
    "Name": ("Name", "name"),
    "StoreType": ("StoreType", "storetype"),
    "Subject": ("Subject", "subject"),
    "Issuer": ("Issuer", "issuer"),
    "IssuedTo": ("IssuedTo", "issuedto"),
    "IssuedBy": ("IssuedBy", "issuedby"),
    "EffectiveDate": ("EffectiveDate", "effectivedate"),
    "ExpirationDate": ("ExpirationDate", "expirationdate"),
    "ExpirationDays": ("ExpirationDays", "expirationdays"),
    "SerialNumber": ("Serialnumber", "SerialNumber", "serialnumber"),
    "Thumbprint": ("Thumbprint", "thumbprint"),
    "KeySize": ("Keysize", "KeySize", "keysize"),
    "SignatureAlgorithm": ("SignatureAlgorithm", "signaturealgorithm"),
    "ConnectorIds": ("ConnectorIds", "connectorids"),
}

REPORT_FIELDS = {
    "Name": ("Name", "name"),
    "Type": ("Type", "type"),
    "CreatedBy": ("CreatedBy", "createdby"),
    "CreatedTime": ("CreatedTime", "createdtime"),
    "ModifiedTime": ("ModifiedTime", "modifiedtime"),
    "TimePeriod": ("TimePeriod", "timeperiod"),
    "Columns": ("Columns", "columns"),
    "GroupRows": ("GroupRows", "grouprows"),
    "Filters": ("Filters", "filters"),
    "Summary": ("Summary", "summary"),
    "Schedule": ("Schedule", "schedule"),
    "StartDate": ("StartDate", "startdate"),
    "EndDate": ("EndDate", "enddate"),
    "Format": ("Format", "format"),
    "EmailReport": ("EmailReport", "emailreport"),
    "EmailSubject": ("EmailSubject", "emailsubject"),
    "EmailRecipients": ("EmailRecipients", "emailrecipients"),
    "TimePeriodStart": ("TimePeriodStart", "timeperiodstart"),
    "TimePeriodEnd": ("TimePeriodEnd", "timeperiodend"),
}

REQUEST_FIELDS = {
    "Id": ("Id", "id"),
    "Timestamp": ("Timestamp", "timestamp"),
    "URL": ("URL", "Url", "url"),
    "Method": ("Method", "method"),
    "User": ("User", "user"),
    "RemoteIP": ("RemoteIP", "remoteip"),
    "Script": ("Script", "script"),
    "Bytes": ("Bytes", "bytes"),
    "Time": ("Time", "time"),
    "Error": ("Error", "error"),
    "Status": ("status", "Status"),
}

# Rows returned by getMessageCount
MESSAGE_COUNT_FIELDS = {
    "ConnectorId": ("ConnectorId", "connectorid"),
    "WorkspaceId": ("Workspace", "WorkspaceId", "workspace", "workspaceid"),
    "Count": ("Count", "count"),
}

# Records returned by actions (export, exchangeCert, ...)
ACTION_RESULT_FIELDS = {
    "Data": ("Data", "data"),
    "Message": ("message", "Message"),
    "Success": ("success", "Success"),
    "TimeCreated": ("TimeCreated", "timecreated"),
}


class ArcRecord:
    """Read-only view over an upstream entity that resolves canonical field names through an alias table."""

    def __init__(self, raw: Optional[Dict[str, Any]], aliases: Mapping[str, Tuple[str, ...]]):
        self.raw = raw or {}
        self._aliases = aliases

    def get(self, name: str, default: Any = None) -> Any:
        for key in self._aliases.get(name, (name,)):
            value = self.raw.get(key)
            if value is not None and value != "":
                return value
        return default

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def extra(self) -> Dict[str, Any]:
        """Entries whose key is not a spelling of any canonical field."""
        known = {key for spellings in self._aliases.values() for key in spellings}
        return {k: v for k, v in self.raw.items() if k not in known and not k.startswith("@odata")}


#######################
## Formatting helpers

def is_true(value: Any) -> bool:
    """Upstream booleans arrive either as JSON booleans or as the strings 'true'/'false'."""
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def yes_no(value: Any) -> str:
    return "Yes" if is_true(value) else "No"


def format_date(value: Optional[str]) -> str:
    """Format an upstream timestamp for display; unparseable values are shown as-is."""
    if not value:
        return "Unknown"
    try:
        moment = datetime.datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return str(value)
    return moment.strftime("%Y-%m-%d %H:%M:%S")


def _trim_decimals(number: float) -> str:
    return f"{number:.2f}".rstrip("0").rstrip(".")


def format_file_size(size: Any) -> str:
    """Format a byte count using bytes, KB, MB, GB or TB with at most two decimals."""
    try:
        size = float(size)
    except (TypeError, ValueError):
        return "Unknown"
    if size <= 0:
        return "0 bytes"
    units = ["bytes", "KB", "MB", "GB", "TB"]
    index = 0
    while size >= 1024 and index < len(units) - 1:
        size /= 1024
        index += 1
    return f"{_trim_decimals(size)} {units[index]}"


def format_bytes(size: Any) -> str:
    """Compact byte formatting used by the monitoring views (B, KB, MB, GB)."""
    try:
        size = float(size)
    except (TypeError, ValueError):
        return "N/A"
    units = ["B", "KB", "MB", "GB"]
    index = 0
    while size >= 1024 and index < len(units) - 1:
        size /= 1024
        index += 1
    return f"{size:.2f} {units[index]}"


def format_duration(milliseconds: Any) -> str:
    """Format a duration in milliseconds as ms, seconds or minutes."""
    try:
        ms = float(milliseconds)
    except (TypeError, ValueError):
        return "N/A"
    if ms < 1000:
        return f"{ms:g}ms"
    if ms < 60000:
        return f"{ms / 1000:.2f}s"
    return f"{ms / 60000:.2f}m"


def status_marker(status: Optional[str]) -> str:
    status = (status or "").strip().lower()
    if status in ("success", "sent", "received", "complete", "completed"):
        return "SUCCESS"
    if status in ("error", "failed", "failure"):
        return "ERROR"
    if status in ("running", "processing"):
        return "RUNNING"
    if status in ("pending", "queued", "waiting"):
        return "PENDING"
    return "UNKNOWN"


def level_marker(level: Optional[str]) -> str:
    level = (level or "").strip().lower()
    if level == "error":
        return "ERROR"
    if level in ("warning", "warn"):
        return "WARN"
    if level == "info":
        return "INFO"
    if level == "debug":
        return "DEBUG"
    return "LOG"


def truncate(text: Any, limit: int) -> str:
    text = str(text)
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


#######################
## Fuzzy suggestions

def suggest_names(search_term: str, candidates: List[str], threshold: int = 60, limit: int = 3) -> List[str]:
    """Return up to `limit` candidates that look like the search term.

    Args:
        search_term: The name the caller asked for
        candidates: Names that actually exist
        threshold: Minimum similarity score (0-100)
        limit: Maximum number of suggestions

    Returns:
        Suggested names, best match first
    """
    if not search_term or not candidates:
        return []
    matches = process.extract(search_term, list(dict.fromkeys(candidates)), scorer=fuzz.ratio, limit=limit)
    return [value for value, score in matches if score >= threshold]
