"""
Workspace tools.
"""
from typing import Dict, Any, List, Tuple
from fastmcp.exceptions import ToolError
from arc_utils import ArcAPIClient, ArcRecord, WORKSPACE_FIELDS, format_date, is_true, odata_literal
from arc_models import (ODataQueryInput, CountInput, WorkspaceIdInput, CreateWorkspaceInput, UpdateWorkspaceInput,
                        WorkspacePropertyInput, SearchWorkspacesInput)


# (section title, [(label, canonical field)]); a section is shown when any of its fields is set
_DETAIL_SECTIONS: List[Tuple[str, List[Tuple[str, str]]]] = [
    ("Email Configuration", [
        ("Protocol", "EmailProtocol"), ("SMTP Server", "SmtpServer"), ("SMTP Port", "SmtpPort"),
        ("SMTP User", "SmtpUser"), ("Auth Mechanism", "SmtpAuthMechanism"), ("SSL Mode", "SmtpSslMode"),
        ("SendGrid URL", "EmailSendgridUrl"),
    ]),
    ("Notification Settings", [
        ("Notify Email", "NotifyEmail"), ("Notify To", "NotifyEmailTo"), ("Notify From", "NotifyEmailFrom"),
        ("Subject", "NotifyEmailSubject"),
    ]),
    ("S3 Configuration", [
        ("Bucket", "S3Bucket"), ("Region", "S3Region"), ("URL", "S3Url"), ("Prefix", "S3Prefix"),
    ]),
    ("Archive & Cleanup", [
        ("Archive Folder", "ArchiveFolder"), ("Archive Destination", "ArchiveDestination"),
        ("Cleanup Send Folder", "CleanupSendFolder"), ("Cleanup Receive Folder", "CleanupReceiveFolder"),
        ("Cleanup Sent Folder", "CleanupSentFolder"), ("Cleanup Transactions", "CleanupTransactions"),
    ]),
    ("Performance Settings", [
        ("Max Workers per Port", "MaxWorkersPerPort"), ("Max Files per Port", "MaxFilesPerPort"),
        ("Backoff Interval", "BackoffInterval"), ("Backoff Min Threshold", "BackoffMinThreshold"),
        ("Backoff Max Threshold", "BackoffMaxThreshold"),
    ]),
    ("Auto Task Settings", [
        ("Auto Task Type", "AutoTaskType"), ("Auto Task Interval", "AutoTaskInterval"),
    ]),
]

_OVERRIDES = [("Performance", "OverridePerformanceSettings"), ("Cleanup", "OverrideCleanupOptions"),
              ("Email", "OverrideEmailSettings")]


def _overrides(w: ArcRecord) -> List[str]:
    return [label for label, field in _OVERRIDES if is_true(w[field])]


def _summary_line(raw: Dict[str, Any]) -> str:
    w = ArcRecord(raw, WORKSPACE_FIELDS)
    props = []
    for label, field in (("SMTP Server", "SmtpServer"), ("SMTP Port", "SmtpPort"), ("SMTP User", "SmtpUser"),
                         ("Email Protocol", "EmailProtocol"), ("S3 Bucket", "S3Bucket"),
                         ("S3 Region", "S3Region"), ("S3 URL", "S3Url"),
                         ("Max Workers", "MaxWorkersPerPort"), ("Max Files", "MaxFilesPerPort")):
        if w.has(field):
            props.append(f"{label}: {w[field]}")
    props.extend(f"{label} Override: Yes" for label in _overrides(w))
    line = f"**{w.get('WorkspaceId', 'Unknown')}** ({w.get('WorkspaceType', 'Unknown')})"
    return line + (f"\n  {', '.join(props)}" if props else "")


async def list_workspaces(client: ArcAPIClient, params: ODataQueryInput) -> str:
    workspaces = await client.list_workspaces(params.query())
    summary = f"Found {len(workspaces)} workspace(s)"
    if params.filter:
        summary += f" matching filter: {params.filter}"
    if not workspaces:
        return f"{summary}\n\nNo workspaces found"
    return f"{summary}\n\n" + "\n\n".join(_summary_line(w) for w in workspaces)


async def get_workspace(client: ArcAPIClient, params: WorkspaceIdInput) -> str:
    workspace = await client.get_workspace(params.workspace_id)
    if workspace is None:
        return f"Workspace '{params.workspace_id}' not found."
    w = ArcRecord(workspace, WORKSPACE_FIELDS)
    lines = [f"**Workspace ID:** {w.get('WorkspaceId', params.workspace_id)}",
             f"**Type:** {w.get('WorkspaceType', 'Not set')}",
             f"**Name:** {w.get('Name', 'N/A')}",
             f"**Description:** {w.get('Description', 'N/A')}"]
    if w.has("CreatedDate"):
        lines.append(f"**Created Date:** {format_date(w['CreatedDate'])}")
    for title, fields in _DETAIL_SECTIONS:
        present = [(label, w[field]) for label, field in fields if w.has(field)]
        if not present:
            continue
        lines.append(f"\n**{title}:**")
        lines.extend(f"  {label}: {value}" for label, value in present)
        if title == "S3 Configuration":
            lines.append(f"  Access Key: {'[CONFIGURED]' if w.has('S3AccessKey') else '[NOT SET]'}")
    overrides = _overrides(w)
    if overrides:
        lines.append(f"\n**Override Settings:** {', '.join(overrides)}")
    return "**Workspace Details**\n\n" + "\n".join(lines)


async def create_workspace(client: ArcAPIClient, params: CreateWorkspaceInput) -> str:
    body: Dict[str, Any] = {"workspaceid": params.workspace_id}
    if params.name:
        body["Name"] = params.name
    if params.description:
        body["Description"] = params.description
    created = ArcRecord(await client.create_workspace(body), WORKSPACE_FIELDS)
    return (f"**Workspace Created Successfully**\n\n"
            f"**ID:** {created.get('WorkspaceId', params.workspace_id)}\n"
            f"**Name:** {created.get('Name', params.name or 'N/A')}\n"
            f"**Description:** {created.get('Description', params.description or 'N/A')}")


async def update_workspace(client: ArcAPIClient, params: UpdateWorkspaceInput) -> str:
    changes: Dict[str, Any] = dict(params.properties or {})
    if params.name:
        changes["Name"] = params.name
    if params.description:
        changes["Description"] = params.description
    if not changes:
        raise ToolError("No update fields provided. Specify name, description or properties to update.")
    await client.update_workspace(params.workspace_id, changes)
    return (f"**Workspace Updated Successfully**\n\n"
            f"**ID:** {params.workspace_id}\n"
            + "".join(f"  • {key}: {value}\n" for key, value in changes.items()))


async def delete_workspace(client: ArcAPIClient, params: WorkspaceIdInput) -> str:
    await client.delete_workspace(params.workspace_id)
    return f"**Workspace Deleted**\n\nWorkspace '{params.workspace_id}' has been permanently deleted."


async def get_workspaces_count(client: ArcAPIClient, params: CountInput) -> str:
    count = await client.count_workspaces({"filter": params.filter})
    scope = f" matching filter '{params.filter}'" if params.filter else ""
    return f"**Workspaces Count**\n\nTotal workspaces{scope}: **{count}**"


async def get_workspace_property(client: ArcAPIClient, params: WorkspacePropertyInput) -> str:
    value = await client.get_workspace_property(params.workspace_id, params.property_name)
    if value is None:
        return f"Workspace '{params.workspace_id}' or property '{params.property_name}' not found."
    return f"**{params.property_name}:** {value if value != '' else 'Not set'}"


async def search_workspaces(client: ArcAPIClient, params: SearchWorkspacesInput) -> str:
    term = odata_literal(params.search_term.lower())
    workspaces = await client.list_workspaces({
        "filter": f"contains(tolower(workspaceid),'{term}') or contains(tolower(workspacetype),'{term}')"
    })
    if not workspaces:
        return f"No workspaces found matching '{params.search_term}'."
    lines = []
    for raw in workspaces:
        w = ArcRecord(raw, WORKSPACE_FIELDS)
        lines.append(f"**{w.get('WorkspaceId', 'Unknown')}** ({w.get('WorkspaceType', 'Unknown')})")
    return f"Found {len(workspaces)} workspace(s) matching '{params.search_term}':\n\n" + "\n".join(lines)
