"""
Monitoring tools: transactions, logs, message counts and transaction logs.
"""
from typing import Dict, Any, List, Optional
import datetime
from arc_utils import ArcAPIClient, ArcRecord, TRANSACTION_FIELDS, LOG_FIELDS, MESSAGE_COUNT_FIELDS
from arc_utils import (as_records, format_bytes, format_date, format_duration, level_marker, status_marker,
                       since_filter, join_filters, odata_literal, truncate, utc_now, parse_count)
from arc_models import (ODataQueryInput, CountInput, TransactionIdInput, TransactionPropertyInput,
                        RecentTransactionsInput, LogIdInput, ErrorLogsInput, MessageCountInput,
                        TransactionLogsInput)


TRANSACTIONS_PER_CONNECTOR = 3
CONTENT_PREVIEW_LENGTH = 200


#######################
## Transactions

def processing_time(t: ArcRecord) -> Optional[float]:
    """Processing time in milliseconds, derived from StartTime/EndTime when ProcessingTime is absent."""
    if t.has("ProcessingTime"):
        try:
            return float(t["ProcessingTime"])
        except (TypeError, ValueError):
            return None
    start, end = t["StartTime"], t["EndTime"]
    if not start or not end:
        return None
    try:
        started = datetime.datetime.fromisoformat(str(start).replace("Z", "+00:00"))
        ended = datetime.datetime.fromisoformat(str(end).replace("Z", "+00:00"))
    except ValueError:
        return None
    return (ended - started).total_seconds() * 1000


def _transaction_block(raw: Dict[str, Any]) -> str:
    t = ArcRecord(raw, TRANSACTION_FIELDS)
    elapsed = processing_time(t)
    text = (f"{status_marker(t['Status'])} **Transaction {t.get('Id', 'Unknown')}**\n"
            f"  Connector: {t.get('ConnectorId', 'Unknown')}\n"
            f"  Status: {t.get('Status', 'Unknown')}\n"
            f"  Timestamp: {format_date(t['Timestamp'])}\n"
            f"  Direction: {t.get('Direction', 'Unknown')}\n"
            f"  Filename: {t.get('Filename', 'None')}\n"
            f"  File Size: {format_bytes(t['FileSize']) if t.has('FileSize') else 'Unknown'}\n"
            f"  Processing Time: {format_duration(elapsed) if elapsed is not None else 'Unknown'}\n")
    if t.has("MessageCount"):
        text += f"  Messages: {t['MessageCount']}\n"
    return text


async def list_transactions(client: ArcAPIClient, params: ODataQueryInput) -> str:
    transactions = await client.list_transactions(params.query(default_orderby="Timestamp DESC"))
    if not transactions:
        return "No transactions found matching the criteria."
    return (f"Found {len(transactions)} transactions:\n\n"
            + "\n".join(_transaction_block(t) for t in transactions))


async def get_transaction(client: ArcAPIClient, params: TransactionIdInput) -> str:
    transaction = await client.get_transaction(params.transaction_id)
    if transaction is None:
        return f"Transaction '{params.transaction_id}' not found."
    t = ArcRecord(transaction, TRANSACTION_FIELDS)
    elapsed = processing_time(t)
    text = (f"{status_marker(t['Status'])} **Transaction Details**\n\n"
            f"**ID:** {t.get('Id', params.transaction_id)}\n"
            f"**Connector ID:** {t.get('ConnectorId', 'Unknown')}\n"
            f"**Workspace:** {t.get('WorkspaceId', 'Unknown')}\n"
            f"**Message ID:** {t.get('MessageId', 'Unknown')}\n"
            f"**Status:** {t.get('Status', 'Unknown')}\n"
            f"**Timestamp:** {format_date(t['Timestamp'])}\n"
            f"**Direction:** {t.get('Direction', 'Unknown')}\n"
            f"**Filename:** {t.get('Filename', 'None')}\n"
            f"**File Path:** {t.get('FilePath', 'Unknown')}\n"
            f"**File Size:** {format_bytes(t['FileSize']) if t.has('FileSize') else 'Unknown'}\n"
            f"**Processing Time:** {format_duration(elapsed) if elapsed is not None else 'Unknown'}\n"
            f"**Connector Type:** {t.get('ConnectorType', 'Unknown')}\n")
    if t.has("EndTime"):
        text += f"**End Time:** {format_date(t['EndTime'])}\n"
    if t.has("MessageCount"):
        text += f"**Message Count:** {t['MessageCount']}\n"
    if transaction.get("BatchGroupId"):
        text += f"**Batch Group ID:** {transaction['BatchGroupId']}\n"
    if transaction.get("ETag"):
        text += f"**ETag:** {transaction['ETag']}\n"
    return text


async def get_recent_transactions(client: ArcAPIClient, params: RecentTransactionsInput) -> str:
    filter_expr = join_filters(
        since_filter("Timestamp", params.hours, client.datetime_style, utc_now()),
        f"Status eq '{odata_literal(params.status)}'" if params.status else None,
        f"ConnectorId eq '{odata_literal(params.connector_id)}'" if params.connector_id else None
    )
    transactions = await client.list_transactions({"filter": filter_expr, "orderby": "Timestamp DESC",
                                                   "top": params.top})
    if not transactions:
        return f"No transactions found in the last {params.hours:g} hours."

    records = [ArcRecord(raw, TRANSACTION_FIELDS) for raw in transactions]
    by_status: Dict[str, int] = {}
    by_connector: Dict[str, List[ArcRecord]] = {}
    for t in records:
        status = t.get("Status", "Unknown")
        by_status[status] = by_status.get(status, 0) + 1
        by_connector.setdefault(t.get("ConnectorId", "Unknown"), []).append(t)

    text = (f"**Recent Transactions (Last {params.hours:g} hours)**\n\n"
            f"**Total Transactions:** {len(records)}\n\n"
            f"**Status Summary:**\n")
    text += "".join(f"  {status_marker(status)} {status}: {count}\n" for status, count in by_status.items())
    text += "\n**By Connector:**\n"
    for connector_id, group in by_connector.items():
        text += f"**{connector_id}** ({len(group)} transactions)\n"
        for t in group[:TRANSACTIONS_PER_CONNECTOR]:
            text += f"  {status_marker(t['Status'])} {t.get('Id', 'Unknown')} - {format_date(t['Timestamp'])}\n"
        if len(group) > TRANSACTIONS_PER_CONNECTOR:
            text += f"  ... and {len(group) - TRANSACTIONS_PER_CONNECTOR} more\n"
        text += "\n"
    return text


async def delete_transaction(client: ArcAPIClient, params: TransactionIdInput) -> str:
    await client.delete_transaction(params.transaction_id)
    return f"**Transaction Deleted**\n\nTransaction '{params.transaction_id}' has been permanently deleted."


async def get_transactions_count(client: ArcAPIClient, params: CountInput) -> str:
    count = await client.count_transactions({"filter": params.filter})
    scope = f" matching filter '{params.filter}'" if params.filter else ""
    return f"**Transactions Count**\n\nTotal transactions{scope}: **{count}**"


async def get_transaction_property(client: ArcAPIClient, params: TransactionPropertyInput) -> str:
    value = await client.get_transaction_property(params.transaction_id, params.property_name)
    if value is None:
        return f"Transaction '{params.transaction_id}' or property '{params.property_name}' not found."
    return (f"**Transaction Property**\n\n"
            f"**Transaction ID:** {params.transaction_id}\n"
            f"**Property:** {params.property_name}\n"
            f"**Value:** {value if value != '' else 'null'}")


#######################
## Logs

async def list_logs(client: ArcAPIClient, params: ODataQueryInput) -> str:
    logs = await client.list_logs(params.query(default_orderby="Timestamp DESC"))
    if not logs:
        return "No logs found matching the criteria."
    blocks = []
    for raw in logs:
        entry = ArcRecord(raw, LOG_FIELDS)
        block = (f"{level_marker(entry['Level'])} **{format_date(entry['Timestamp'])}** "
                 f"[{entry.get('Level', 'INFO')}]\n"
                 f"  {entry.get('Message', 'No message')}\n")
        if entry.has("ConnectorId"):
            block += f"  Connector: {entry['ConnectorId']}\n"
        if entry.has("Category"):
            block += f"  Category: {entry['Category']}\n"
        blocks.append(block)
    return f"Found {len(logs)} log entries:\n\n" + "\n".join(blocks)


async def get_log(client: ArcAPIClient, params: LogIdInput) -> str:
    log = await client.get_log(params.log_id)
    if log is None:
        return f"Log entry '{params.log_id}' not found."
    entry = ArcRecord(log, LOG_FIELDS)
    text = (f"{level_marker(entry['Level'])} **Log Entry Details**\n\n"
            f"**ID:** {entry.get('Id', params.log_id)}\n"
            f"**Timestamp:** {format_date(entry['Timestamp'])}\n"
            f"**Type:** {entry.get('Level', 'INFO')}\n"
            f"**Message:** {entry.get('Message', 'No message')}\n")
    if entry.has("ConnectorId"):
        text += f"**Connector ID:** {entry['ConnectorId']}\n"
    if entry.has("Category"):
        text += f"**Category:** {entry['Category']}\n"
    return text


async def get_error_logs(client: ArcAPIClient, params: ErrorLogsInput) -> str:
    filter_expr = join_filters(
        since_filter("Timestamp", params.hours, client.datetime_style, utc_now()),
        "Type eq 'Error'",
        f"ConnectorId eq '{odata_literal(params.connector_id)}'" if params.connector_id else None
    )
    logs = await client.list_logs({"filter": filter_expr, "orderby": "Timestamp DESC", "top": params.top})
    if not logs:
        scope = f" for connector '{params.connector_id}'" if params.connector_id else ""
        return f"No error logs found in the last {params.hours:g} hours{scope}."

    text = f"**Error Logs (Last {params.hours:g} hours)**\n\n"
    if params.connector_id:
        text += f"**Connector:** {params.connector_id}\n"
    text += f"**Total Errors:** {len(logs)}\n\n"
    for raw in logs:
        entry = ArcRecord(raw, LOG_FIELDS)
        text += f"ERROR **{format_date(entry['Timestamp'])}**\n  {entry.get('Message', 'No message')}\n"
        if entry.has("ConnectorId"):
            text += f"  Connector: {entry['ConnectorId']}\n"
        if entry.has("Category"):
            text += f"  Category: {entry['Category']}\n"
        text += "\n"
    return text


async def delete_log(client: ArcAPIClient, params: LogIdInput) -> str:
    await client.delete_log(params.log_id)
    return f"**Log Deleted**\n\nLog entry '{params.log_id}' has been permanently deleted."


#######################
## Message counts and transaction logs

async def get_message_count(client: ArcAPIClient, params: MessageCountInput) -> str:
    rows = as_records(await client.get_message_count({
        "WorkspaceId": params.workspace_id,
        "ConnectorId": params.connector_id,
        "Folder": params.folder
    }))
    if not rows:
        return "**No Message Counts Found**\n\nNo connectors found matching the specified criteria."

    counts = [ArcRecord(row, MESSAGE_COUNT_FIELDS) for row in rows]
    total = sum(parse_count(str(c.get("Count", "0"))) for c in counts)
    text = (f"**Message Count Summary**\n\n"
            f"**Total Unsent Messages:** {total}\n"
            f"**Connectors Checked:** {len(rows)}\n\n"
            f"**Per Connector:**\n")
    for c in counts:
        text += (f"• **{c.get('ConnectorId', 'Unknown')}** ({c.get('WorkspaceId', 'Unknown')}): "
                 f"{c.get('Count', '0')} messages\n")
    if params.workspace_id or params.connector_id or params.folder:
        text += "\n**Filters Applied:**\n"
        if params.workspace_id:
            text += f"• Workspace: {params.workspace_id}\n"
        if params.connector_id:
            text += f"• Connector: {params.connector_id}\n"
        if params.folder:
            text += f"• Folder: {params.folder}\n"
    return text


async def get_transaction_logs(client: ArcAPIClient, params: TransactionLogsInput) -> str:
    rows = as_records(await client.get_transaction_logs({
        "WorkspaceId": params.workspace_id,
        "ConnectorId": params.connector_id,
        "PortId": params.port_id,
        "MessageId": params.message_id,
        "Direction": params.direction,
        "Type": params.type,
        "IncludeContent": "True" if params.include_content else "False"
    }))
    if not rows:
        return "**No Transaction Logs Found**\n\nNo log files found for the specified transaction."

    text = (f"**Transaction Logs**\n\n"
            f"**Message ID:** {params.message_id}\n"
            f"**Direction:** {params.direction}\n")
    if params.workspace_id:
        text += f"**Workspace:** {params.workspace_id}\n"
    if params.connector_id:
        text += f"**Connector:** {params.connector_id}\n"
    if params.port_id:
        text += f"**Port:** {params.port_id}\n"
    if params.type:
        text += f"**Log Type Filter:** {params.type}\n"
    text += f"\n**Found {len(rows)} log file(s):**\n\n"
    for index, log in enumerate(rows, start=1):
        text += (f"**Log {index}:**\n"
                 f"• **File:** {log.get('File') or 'Unknown'}\n"
                 f"• **Type:** {log.get('Type') or 'Unknown'}\n"
                 f"• **Created:** {format_date(log.get('TimeCreated'))}\n"
                 f"• **Path:** {log.get('Path') or 'N/A'}\n")
        if params.include_content and log.get("Content"):
            text += f"• **Content:** {truncate(log['Content'], CONTENT_PREVIEW_LENGTH)}\n"
        text += "\n"
    return text
