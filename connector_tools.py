"""
Connector tools: connector CRUD plus the connector actions (copy, receive, send, flow).
"""
from typing import Dict, Any, List, Tuple
import json
import logging
from fastmcp.exceptions import ToolError
from arc_utils import ArcAPIClient, ArcAPIError, ArcRecord, CONNECTOR_FIELDS
from arc_utils import as_records, yes_no, suggest_names
from arc_models import (ODataQueryInput, ConnectorIdInput, CreateConnectorInput, UpdateConnectorInput,
                        CopyConnectorInput, ReceiveFileInput, SendFileInput, SetFlowInput)


logger = logging.getLogger(__name__)

RECEIVE_INTERVAL_KEY = "receiveinterval"


def _connector_block(raw: Dict[str, Any]) -> str:
    c = ArcRecord(raw, CONNECTOR_FIELDS)
    return (f"• **{c.get('ConnectorId', 'Unknown')}**\n"
            f"  Workspace: {c.get('WorkspaceId', 'default')}\n"
            f"  Type: {c.get('ConnectorType', 'Unknown')}\n"
            f"  Auto Send: {yes_no(c['AutomationSend'])}\n"
            f"  Auto Receive: {yes_no(c['AutomationReceive'])}\n"
            f"  Receive Interval: {c.get('ReceiveInterval', 'Not set')}\n"
            f"  Retry Interval: {c.get('AutomationRetryInterval', 'Not set')} min\n"
            f"  Max Attempts: {c.get('AutomationMaxAttempts', 'Not set')}\n"
            f"  Max Workers: {c.get('MaxWorkers', 'Default')}\n"
            f"  Max Files: {c.get('MaxFiles', 'Default')}\n"
            f"  Save To Sent: {yes_no(c['SaveToSentFolder'])}\n"
            f"  Log Level: {c.get('LogLevel', 'Not set')}\n"
            f"  Log Messages: {yes_no(c['LogMessages'])}\n")


async def list_connectors(client: ArcAPIClient, params: ODataQueryInput) -> str:
    connectors = await client.list_connectors(params.query())
    if not connectors:
        return "No connectors found." + (f" Filter: {params.filter}" if params.filter else "")
    return f"**Found {len(connectors)} connectors:**\n\n" + "\n".join(_connector_block(c) for c in connectors)


async def get_connector(client: ArcAPIClient, params: ConnectorIdInput) -> str:
    connector = await client.get_connector(params.connector_id)
    if connector is None:
        return f"Connector '{params.connector_id}' not found."
    c = ArcRecord(connector, CONNECTOR_FIELDS)
    return (f"**Connector Details for: {params.connector_id}**\n\n"
            f"**Quick Summary:**\n"
            f"**ID:** {c.get('ConnectorId', params.connector_id)}\n"
            f"**Workspace:** {c.get('WorkspaceId', 'default')}\n"
            f"**Type:** {c.get('ConnectorType', 'Unknown')}\n"
            f"**Auto Send:** {yes_no(c['AutomationSend'])}\n"
            f"**Auto Receive:** {yes_no(c['AutomationReceive'])}\n"
            f"**Log Level:** {c.get('LogLevel', 'N/A')}\n\n"
            f"**Full Configuration (use property names from this to update the connector):**\n"
            f"```json\n{json.dumps(connector, indent=2, default=str)}\n```")


async def create_connector(client: ArcAPIClient, params: CreateConnectorInput) -> str:
    body: Dict[str, Any] = dict(params.properties or {})
    body["connectorid"] = params.connector_id
    body["connectortype"] = params.connector_type
    if params.workspace_id:
        body["workspace"] = params.workspace_id

    try:
        created = await client.create_connector(body)
    except ArcAPIError as e:
        if e.code == "CreateConnector" and "already exists" in (e.message or "").lower():
            return (f"**Connector Already Exists**\n\n"
                    f"Connector '{params.connector_id}' already exists in workspace "
                    f"'{params.workspace_id or 'default'}'. Connector IDs are case-insensitive.")
        raise

    c = ArcRecord(created, CONNECTOR_FIELDS)
    text = (f"**Connector Created Successfully**\n\n"
            f"**ID:** {c.get('ConnectorId', params.connector_id)}\n"
            f"**Workspace:** {c.get('WorkspaceId', params.workspace_id or 'default')}\n"
            f"**Type:** {c.get('ConnectorType', params.connector_type)}")
    if c.has("AutomationSend"):
        text += f"\n**Auto Send:** {yes_no(c['AutomationSend'])}"
    if c.has("AutomationReceive"):
        text += f"\n**Auto Receive:** {yes_no(c['AutomationReceive'])}"
    return text


def is_valid_cron(expression: Any) -> bool:
    """Syntactic check only: a cron expression has exactly five whitespace separated fields."""
    return isinstance(expression, str) and len(expression.split()) == 5


def filter_connector_update(live: Dict[str, Any], requested: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    """Keep only the requested properties that exist on the live connector.

    Args:
        live: Current connector representation
        requested: Properties the caller wants to change

    Returns:
        Tuple of (changes keyed by the live spelling, warnings)
    """
    live_keys = {key.lower(): key for key in live if not key.startswith("@odata")}
    changes: Dict[str, Any] = {}
    unknown: List[str] = []
    warnings: List[str] = []

    for name, value in requested.items():
        key = live_keys.get(name.lower())
        if key is None:
            unknown.append(name)
            continue
        if key.lower() == RECEIVE_INTERVAL_KEY and not is_valid_cron(value):
            warnings.append(
                f"'{RECEIVE_INTERVAL_KEY}' value '{value}' doesn't appear to be a valid cron expression. "
                f"Expected format: 'minute hour day-of-month month day-of-week' (e.g., '0 2 * * *' for "
                f"daily at 2 AM). The value was not updated.")
            continue
        changes[key] = value

    if unknown:
        lines = []
        for name in unknown:
            hints = suggest_names(name.lower(), list(live_keys), limit=1)
            lines.append(f"  • {name}" + (f" (did you mean '{live_keys[hints[0]]}'?)" if hints else ""))
        warnings.insert(0, "The following properties don't exist in this connector type and were not updated:\n"
                        + "\n".join(lines))
    return changes, warnings


async def update_connector(client: ArcAPIClient, params: UpdateConnectorInput) -> str:
    live = await client.get_connector(params.connector_id)
    if live is None:
        return f"Connector '{params.connector_id}' not found."

    changes, warnings = filter_connector_update(live, params.properties)
    applied = {key.lower() for key in changes}
    dropped = [name for name in params.properties if name.lower() not in applied]
    if dropped:
        logger.warning("Not updating properties %s on connector %s", dropped, params.connector_id)
    current = ArcRecord(live, CONNECTOR_FIELDS)
    if not changes:
        available = sorted(key for key in live if not key.startswith("@odata"))
        known = {key.lower() for key in available}
        if any(name.lower() in known for name in params.properties):
            reason = "None of the provided property values passed validation."
        else:
            reason = "None of the provided properties match this connector's available properties."
        text = f"**No Valid Properties to Update**\n\n{reason}\n\n"
        if warnings:
            text += "**Warnings:**\n" + "\n".join(warnings) + "\n\n"
        return text + (f"Available properties for {current.get('ConnectorType', 'this')} connector:\n"
                       f"{', '.join(available)}")

    updated = await client.update_connector(params.connector_id, changes)
    u = ArcRecord(updated or live, CONNECTOR_FIELDS)
    text = (f"**Connector Updated Successfully**\n\n"
            f"**ID:** {u.get('ConnectorId', params.connector_id)}\n"
            f"**Workspace:** {u.get('WorkspaceId', 'default')}\n"
            f"**Type:** {u.get('ConnectorType', 'Unknown')}\n\n")
    if warnings:
        text += "**Warnings:**\n" + "\n".join(warnings) + "\n\n"
    text += "**Successfully Updated Properties:**\n"
    text += "".join(f"  • {key}: {value}\n" for key, value in changes.items())
    return text


async def delete_connector(client: ArcAPIClient, params: ConnectorIdInput) -> str:
    await client.delete_connector(params.connector_id)
    return f"**Connector Deleted**\n\nConnector '{params.connector_id}' has been permanently deleted."


async def copy_connector(client: ArcAPIClient, params: CopyConnectorInput) -> str:
    result = await client.copy_connector({
        "WorkspaceId": params.workspace_id,
        "ConnectorId": params.connector_id,
        "NewConnectorId": params.new_connector_id,
        "NewWorkspaceId": params.new_workspace_id
    })
    target_workspace = params.new_workspace_id or params.workspace_id
    text = (f"**Connector Copied Successfully**\n\n"
            f"**Source:** {params.connector_id} (workspace: {params.workspace_id})\n"
            f"**Destination:** {params.new_connector_id} (workspace: {target_workspace})")
    records = as_records(result)
    if records and records[0].get("AllowedPrivileges"):
        text += f"\n**Privileges:** {records[0]['AllowedPrivileges']}"
    return text


def split_file_results(result: Any) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """Drop placeholder rows (blank File) and split the rest into succeeded and failed rows."""
    rows = [row for row in as_records(result) if str(row.get("File") or "").strip()]
    succeeded = [row for row in rows if not row.get("ErrorMessage")]
    failed = [row for row in rows if row.get("ErrorMessage")]
    return succeeded, failed


def _file_result_lines(succeeded: List[Dict[str, Any]], failed: List[Dict[str, Any]], verb: str) -> str:
    text = f"**Succeeded:** {len(succeeded)} | **Failed:** {len(failed)}\n\n"
    if succeeded:
        text += f"**Successfully {verb} ({len(succeeded)}):**\n"
        for row in succeeded:
            line = f"• **{row.get('File')}**"
            if row.get("FileSize"):
                line += f" ({row['FileSize']} bytes)"
            if row.get("Subfolder"):
                line += f" in {row['Subfolder']}"
            if row.get("MessageId"):
                line += f" [{row['MessageId']}]"
            text += line + "\n"
        text += "\n"
    if failed:
        text += f"**Failed ({len(failed)}):**\n"
        text += "".join(f"• **{row.get('File')}**: {row['ErrorMessage']}\n" for row in failed)
    return text


async def receive_file(client: ArcAPIClient, params: ReceiveFileInput) -> str:
    result = await client.receive_file({"WorkspaceId": params.workspace_id, "ConnectorId": params.connector_id})
    succeeded, failed = split_file_results(result)
    header = f"**Connector:** {params.connector_id}\n"
    if params.workspace_id:
        header += f"**Workspace:** {params.workspace_id}\n"
    if not succeeded and not failed:
        return (f"**Receive Operation Completed**\n\n{header}"
                f"**Result:** Operation completed successfully but no files were available to download.")
    return (f"**File Receive Operation Completed**\n\n{header}"
            f"**Files Processed:** {len(succeeded) + len(failed)}\n"
            + _file_result_lines(succeeded, failed, "Received"))


async def send_file(client: ArcAPIClient, params: SendFileInput) -> str:
    header = f"**Connector:** {params.connector_id}\n"
    if params.workspace_id:
        header += f"**Workspace:** {params.workspace_id}\n"
    try:
        result = await client.send_file({
            "WorkspaceId": params.workspace_id,
            "ConnectorId": params.connector_id,
            "PortId": params.port_id,
            "MessageId": params.message_id,
            "File": params.file,
            "Subfolder": params.subfolder,
            "Attachment#": params.attachment
        })
    except ArcAPIError as e:
        if not e.is_structured:
            raise
        raise ToolError(f"**Send Operation Failed**\n\n{header}"
                        f"**Error Code:** {e.code}\n"
                        f"**Error Message:** {e.message or 'No details provided'}") from e

    succeeded, failed = split_file_results(result)
    if params.file:
        header += f"**Specific File:** {params.file}\n"
    if params.subfolder:
        header += f"**Subfolder:** {params.subfolder}\n"
    if not succeeded and not failed:
        return (f"**Send Operation Completed**\n\n{header}"
                f"**Result:** Operation completed successfully but no files were available to send "
                f"from the send folder.")
    return (f"**File Send Operation Completed**\n\n{header}"
            f"**Files Processed:** {len(succeeded) + len(failed)}\n"
            + _file_result_lines(succeeded, failed, "Sent"))


def _describe_connection(connection: Any) -> str:
    if isinstance(connection, str):
        return connection
    return connection.dest + (f" ({connection.output})" if connection.output else "")


async def set_flow(client: ArcAPIClient, params: SetFlowInput) -> str:
    body = {
        "WorkspaceId": params.workspace_id,
        "Value": [
            {
                "ConnectorId": flow.connector_id,
                "Connections": [c if isinstance(c, str) else c.model_dump(exclude_none=True)
                                for c in flow.connections]
            }
            for flow in params.flows
        ]
    }
    try:
        await client.set_flow(body)
    except ArcAPIError as e:
        if not e.is_structured:
            raise
        raise ToolError(f"**Flow Configuration Failed**\n\n"
                        f"**Workspace:** {params.workspace_id}\n"
                        f"**Error Code:** {e.code}\n"
                        f"**Error Message:** {e.message or 'No details provided'}") from e

    text = (f"**Flow Configuration Updated Successfully**\n\n"
            f"**Workspace:** {params.workspace_id}\n"
            f"**Connectors Configured:** {len(params.flows)}\n\n"
            f"**Flow Connections:**\n")
    for flow in params.flows:
        targets = ", ".join(_describe_connection(c) for c in flow.connections) or "(no connections)"
        text += f"• **{flow.connector_id}** → {targets}\n"
    return text
