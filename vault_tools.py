"""
Vault tools.

The Admin API has no server side lookup by name, so get/update/delete fetch the
whole vault and match Name case-insensitively. A name that matches more than one
entry is never resolved implicitly; the caller has to disambiguate.
"""
from typing import Dict, Any, Union
from arc_utils import ArcAPIClient, ArcRecord, VAULT_FIELDS, odata_literal, suggest_names
from arc_models import (ODataQueryInput, CountInput, VaultIdInput, CreateVaultEntryInput, UpdateVaultEntryInput,
                        VaultPropertyInput, SearchVaultInput)


MASK = "********"


def _entry_lines(v: ArcRecord, show_value: bool) -> str:
    value = v.get("Value")
    if value is not None and not show_value:
        value = MASK
    return (f"**Name:** {v.get('Name', 'Unknown')}\n"
            f"**ID:** {v.get('Id', 'Unknown')}\n"
            f"**Type:** {v.get('Type', 'Unknown')}\n"
            f"**Show Type:** {v.get('ShowType', 'Unknown')}\n"
            f"**Tags:** {v.get('Tags', 'None')}\n"
            f"**Value:** {value if value is not None else 'Not set'}\n")


async def resolve_vault_entry(client: ArcAPIClient, name: str) -> Union[ArcRecord, str]:
    """Resolve a vault entry by case-insensitive name.

    Args:
        client: API client
        name: Name the caller passed as vault_id

    Returns:
        The single matching entry, or the message to return when zero or several entries match
    """
    entries = [ArcRecord(raw, VAULT_FIELDS) for raw in await client.list_vault_entries()]
    matches = [v for v in entries if str(v.get("Name", "")).lower() == name.lower()]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        text = f"Vault entry with name '{name}' not found."
        suggestions = suggest_names(name, [str(v.get("Name")) for v in entries if v.has("Name")])
        if suggestions:
            text += "\n\nDid you mean: " + ", ".join(f"'{s}'" for s in suggestions) + "?"
        return text
    listing = "\n".join(f"• {v.get('Name')} (ID: {v.get('Id')})" for v in matches)
    return f"Multiple vault entries found with name '{name}':\n\n{listing}\n\nPlease use a more specific name."


async def list_vault_entries(client: ArcAPIClient, params: ODataQueryInput) -> str:
    entries = await client.list_vault_entries(params.query(default_orderby="Name ASC"))
    if not entries:
        return "No vault entries found matching the criteria."
    blocks = []
    for raw in entries:
        v = ArcRecord(raw, VAULT_FIELDS)
        blocks.append(f"**{v.get('Name', 'Unknown')}**\n"
                      f"  ID: {v.get('Id', 'Unknown')}\n"
                      f"  Type: {v.get('Type', 'Unknown')}\n"
                      f"  Show Type: {v.get('ShowType', 'Unknown')}\n"
                      f"  Tags: {v.get('Tags', 'None')}\n"
                      f"  Value: {MASK if v.has('Value') else 'Not set'}\n")
    return f"Found {len(entries)} vault entries:\n\n" + "\n".join(blocks)


async def get_vault_entry(client: ArcAPIClient, params: VaultIdInput) -> str:
    entry = await resolve_vault_entry(client, params.vault_id)
    if isinstance(entry, str):
        return entry
    return "**Vault Entry Details**\n\n" + _entry_lines(entry, show_value=True)


async def create_vault_entry(client: ArcAPIClient, params: CreateVaultEntryInput) -> str:
    body: Dict[str, Any] = {"Id": params.id, "Name": params.name, "Value": params.value}
    if params.type:
        body["Type"] = params.type
    if params.show_type:
        body["ShowType"] = params.show_type
    if params.tags:
        body["Tags"] = params.tags
    created = await client.create_vault_entry(body)
    entry = ArcRecord({**body, **(created or {})}, VAULT_FIELDS)
    return ("**Vault Entry Created**\n\n" + _entry_lines(entry, show_value=False)
            + "\nVault entry has been successfully created.")


async def update_vault_entry(client: ArcAPIClient, params: UpdateVaultEntryInput) -> str:
    changes: Dict[str, Any] = {}
    for field, key in (("name", "Name"), ("value", "Value"), ("type", "Type"),
                       ("show_type", "ShowType"), ("tags", "Tags")):
        value = getattr(params, field)
        if value is not None:
            changes[key] = value
    if not changes:
        return "No update fields provided. Specify name, value, type, show_type or tags."

    entry = await resolve_vault_entry(client, params.vault_id)
    if isinstance(entry, str):
        return entry
    entry_id = entry.get("Id")
    updated = await client.update_vault_entry(entry_id, changes)
    merged = ArcRecord({**entry.raw, **changes, **(updated or {})}, VAULT_FIELDS)
    return ("**Vault Entry Updated**\n\n" + _entry_lines(merged, show_value=False)
            + "\nVault entry has been successfully updated.")


async def delete_vault_entry(client: ArcAPIClient, params: VaultIdInput) -> str:
    entry = await resolve_vault_entry(client, params.vault_id)
    if isinstance(entry, str):
        return entry
    entry_id = entry.get("Id")
    await client.delete_vault_entry(entry_id)
    return (f"**Vault Entry Deleted**\n\nVault entry '{entry.get('Name')}' (ID: {entry_id}) "
            f"has been permanently deleted.")


async def get_vault_count(client: ArcAPIClient, params: CountInput) -> str:
    count = await client.count_vault_entries({"filter": params.filter})
    scope = f" matching filter '{params.filter}'" if params.filter else ""
    return f"**Vault Entries Count**\n\nTotal vault entries{scope}: **{count}**"


async def get_vault_property(client: ArcAPIClient, params: VaultPropertyInput) -> str:
    value = await client.get_vault_property(params.vault_id, params.property_name)
    if value is None:
        return f"Vault entry '{params.vault_id}' or property '{params.property_name}' not found."
    return (f"**Vault Property**\n\n"
            f"**Vault ID:** {params.vault_id}\n"
            f"**Property:** {params.property_name}\n"
            f"**Value:** {value if value != '' else 'Not set'}")


async def search_vault_by_type(client: ArcAPIClient, params: SearchVaultInput) -> str:
    filter_expr = f"Type eq '{odata_literal(params.type)}'"
    if params.tags:
        filter_expr += f" and contains(Tags, '{odata_literal(params.tags)}')"
    entries = await client.list_vault_entries({"filter": filter_expr, "orderby": "Name ASC"})
    if not entries:
        criteria = f"type '{params.type}'"
        if params.tags:
            criteria += f" and tags containing '{params.tags}'"
        return f"No vault entries found with {criteria}."

    text = f"**Vault Entries by Type: {params.type}**\n\n"
    if params.tags:
        text += f"**Filtered by tags containing:** {params.tags}\n\n"
    text += f"**Total found:** {len(entries)}\n\n"
    for raw in entries:
        v = ArcRecord(raw, VAULT_FIELDS)
        text += (f"**{v.get('Name', 'Unnamed')}** ({v.get('Id', 'Unknown')})\n"
                 f"  Type: {v.get('Type', 'Unknown')}\n"
                 f"  Tags: {v.get('Tags', 'None')}\n\n")
    return text
