"""
File tools. Single files are addressed by the composite key (ConnectorId, Folder, Filename, MessageId).
"""
from typing import Dict, Any, List
from arc_utils import ArcAPIClient, ArcRecord, FILE_FIELDS
from arc_utils import format_file_size, format_date, since_filter, join_filters, odata_literal, utc_now
from arc_models import (ODataQueryInput, FileKeyInput, CreateFileInput, UpdateFileInput,
                        FilesByConnectorInput, RecentFilesInput)


RECENT_FILES_PER_CONNECTOR = 5


def _file_details(raw: Dict[str, Any], time_label: str = "Created") -> str:
    f = ArcRecord(raw, FILE_FIELDS)
    text = (f"**Filename:** {f.get('Filename', 'Unknown')}\n"
            f"**Connector ID:** {f.get('ConnectorId', 'Unknown')}\n"
            f"**Folder:** {f.get('Folder', 'Unknown')}\n"
            f"**Message ID:** {f.get('MessageId', 'N/A')}\n"
            f"**Size:** {format_file_size(f['FileSize'])}\n"
            f"**{time_label}:** {format_date(f['TimeCreated'])}\n")
    if f.has("Subfolder"):
        text += f"**Subfolder:** {f['Subfolder']}\n"
    if f.has("BatchGroupId"):
        text += f"**Batch Group ID:** {f['BatchGroupId']}\n"
    return text


async def list_files(client: ArcAPIClient, params: ODataQueryInput) -> str:
    files = await client.list_files(params.query())
    if not files:
        return "No files found matching the criteria."
    blocks = []
    for raw in files:
        f = ArcRecord(raw, FILE_FIELDS)
        block = (f"• **{f.get('Filename', 'Unknown')}** ({f.get('ConnectorId', 'Unknown')})\n"
                 f"  Folder: {f.get('Folder', 'Unknown')}\n"
                 f"  Message ID: {f.get('MessageId', 'N/A')}\n"
                 f"  Size: {format_file_size(f['FileSize'])}\n"
                 f"  Created: {format_date(f['TimeCreated'])}\n")
        if f.has("Subfolder"):
            block += f"  Subfolder: {f['Subfolder']}\n"
        if f.has("BatchGroupId"):
            block += f"  Batch Group: {f['BatchGroupId']}\n"
        blocks.append(block)
    return f"**Found {len(files)} files:**\n\n" + "\n".join(blocks)


async def get_file(client: ArcAPIClient, params: FileKeyInput) -> str:
    file = await client.get_file(params.connector_id, params.folder, params.filename, params.message_id)
    if file is None:
        return (f"File not found: {params.filename} in {params.folder} "
                f"for connector {params.connector_id}")
    f = ArcRecord(file, FILE_FIELDS)
    return ("**File Details**\n\n" + _file_details(file)
            + f"**File Path:** {f.get('FilePath', 'N/A')}\n"
            + f"**Has Content:** {'Yes (Base64 encoded)' if file.get('Content') else 'No'}\n")


async def create_file(client: ArcAPIClient, params: CreateFileInput) -> str:
    body = {
        "ConnectorId": params.connector_id,
        "Folder": params.folder,
        "Filename": params.filename,
        "MessageId": params.message_id,
        **params.changes()
    }
    created = await client.create_file(body)
    return "**File Created Successfully**\n\n" + _file_details({**body, **(created or {})})


async def update_file(client: ArcAPIClient, params: UpdateFileInput) -> str:
    updated = await client.update_file(params.connector_id, params.folder, params.filename,
                                       params.message_id, params.changes())
    key = {"ConnectorId": params.connector_id, "Folder": params.folder,
           "Filename": params.filename, "MessageId": params.message_id}
    return "**File Updated Successfully**\n\n" + _file_details({**key, **(updated or {})}, time_label="Updated")


async def delete_file(client: ArcAPIClient, params: FileKeyInput) -> str:
    await client.delete_file(params.connector_id, params.folder, params.filename, params.message_id)
    return (f"**File Deleted**\n\nFile '{params.filename}' has been permanently deleted from folder "
            f"'{params.folder}' for connector '{params.connector_id}'.")


async def get_files_by_connector(client: ArcAPIClient, params: FilesByConnectorInput) -> str:
    filter_expr = join_filters(
        f"ConnectorId eq '{odata_literal(params.connector_id)}'",
        f"Folder eq '{odata_literal(params.folder)}'" if params.folder else None
    )
    files = await client.list_files({"filter": filter_expr, "orderby": params.orderby, "top": params.top})
    if not files:
        return f"No files found for connector '{params.connector_id}'."

    records = [ArcRecord(raw, FILE_FIELDS) for raw in files]
    total_size = sum(_size(f['FileSize']) for f in records)
    text = (f"**Files for Connector '{params.connector_id}'**\n\n"
            f"**Total Files:** {len(records)}\n"
            f"**Total Size:** {format_file_size(total_size)}\n\n"
            f"**Files:**\n")
    text += "\n".join(f"• **{f.get('Filename', 'Unknown')}**\n"
                      f"  Folder: {f.get('Folder', 'Unknown')}\n"
                      f"  Size: {format_file_size(f['FileSize'])}\n"
                      f"  Created: {format_date(f['TimeCreated'])}" for f in records)
    return text


def _size(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


async def get_recent_files(client: ArcAPIClient, params: RecentFilesInput) -> str:
    filter_expr = join_filters(
        since_filter("TimeCreated", params.hours, client.datetime_style, utc_now()),
        f"ConnectorId eq '{odata_literal(params.connector_id)}'" if params.connector_id else None,
        f"Folder eq '{odata_literal(params.folder)}'" if params.folder else None
    )
    files = await client.list_files({"filter": filter_expr, "orderby": "TimeCreated DESC", "top": params.top})
    if not files:
        return f"No files found in the last {params.hours:g} hours."

    by_connector: Dict[str, List[ArcRecord]] = {}
    for raw in files:
        f = ArcRecord(raw, FILE_FIELDS)
        by_connector.setdefault(f.get("ConnectorId", "Unknown"), []).append(f)

    text = (f"**Recent Files (Last {params.hours:g} hours)**\n\n"
            f"**Total Files:** {len(files)}\n\n")
    for connector_id, group in by_connector.items():
        text += f"**{connector_id}** ({len(group)} files)\n"
        for f in group[:RECENT_FILES_PER_CONNECTOR]:
            text += (f"  • {f.get('Filename', 'Unknown')} - {format_file_size(f['FileSize'])} - "
                     f"{format_date(f['TimeCreated'])}\n")
        if len(group) > RECENT_FILES_PER_CONNECTOR:
            text += f"  • ... and {len(group) - RECENT_FILES_PER_CONNECTOR} more\n"
        text += "\n"
    return text
