"""
Maintenance actions: file cleanup and configuration export/import.
"""
from typing import Dict, Any, List
from arc_utils import ArcAPIClient, ArcRecord, ACTION_RESULT_FIELDS, as_records
from arc_models import CleanupInput, ExportInput, ImportInput


def _details(records: List[Dict[str, Any]], skip: tuple = ("success",)) -> str:
    lines = [f"{key}: {value}" for record in records for key, value in record.items()
             if key not in skip and not key.startswith("@odata")]
    if not lines:
        return ""
    return "\n\n**Response Details:**\n" + "\n".join(lines)


async def cleanup_files(client: ArcAPIClient, params: CleanupInput) -> str:
    result = await client.cleanup({
        "Type": params.type,
        "Age": params.age,
        "WorkspaceId": params.workspace_id,
        "ConnectorId": params.connector_id
    })
    scope = [f"workspace: {params.workspace_id}" if params.workspace_id else "all workspaces",
             f"connector: {params.connector_id}" if params.connector_id else "all connectors"]
    mode = f" ({params.type} mode)" if params.type else " (using default settings)"
    age = f" for files older than {params.age} days" if params.age is not None else ""
    return f"Cleanup operation completed for {', '.join(scope)}{mode}{age}" + _details(as_records(result))


async def export_configuration(client: ArcAPIClient, params: ExportInput) -> str:
    records = as_records(await client.export_configuration({
        "WorkspaceId": params.workspace_id,
        "ConnectorId": params.connector_id,
        "Password": params.password
    }))
    if params.connector_id:
        target = f"connector '{params.connector_id}'"
    elif params.workspace_id:
        target = f"workspace '{params.workspace_id}'"
    else:
        target = "the whole application"
    text = f"**Configuration Exported**\n\nExported {target}."
    results = [ArcRecord(r, ACTION_RESULT_FIELDS) for r in records]
    data = next((r["Data"] for r in results if r.has("Data")), None)
    if data:
        text += (f"\n\n**Archive Size:** {len(data)} characters (base64)\n"
                 f"**Data:**\n{data}")
    else:
        text += "\n\nThe server returned no archive data."
    return text + _details(records, skip=("success", "Data", "data"))


async def import_configuration(client: ArcAPIClient, params: ImportInput) -> str:
    overwrite = None if params.overwrite is None else str(params.overwrite).lower()
    records = as_records(await client.import_configuration({
        "Data": params.data,
        "Password": params.password,
        "Overwrite": overwrite
    }))
    text = "**Configuration Imported**\n\nThe archive was imported successfully."
    if params.overwrite:
        text += "\nExisting items were overwritten."
    return text + _details(records)
