"""
HTTP request log tools.
"""
from typing import Dict, Any, List, Optional
from arc_utils import ArcAPIClient, ArcRecord, REQUEST_FIELDS
from arc_utils import format_bytes, format_date, format_duration, join_filters, odata_literal, since_filter, utc_now
from arc_models import ODataQueryInput, CountInput, RequestIdInput, RecentRequestsInput, ErrorRequestsInput


RECENT_REQUESTS_SHOWN = 10


def status_range(status: Any) -> str:
    """Bucket an HTTP status code into its class label."""
    try:
        code = int(str(status).strip()[:3])
    except (TypeError, ValueError):
        return "Unknown"
    if 200 <= code < 300:
        return "2xx Success"
    if 300 <= code < 400:
        return "3xx Redirect"
    if 400 <= code < 500:
        return "4xx Client Error"
    if code >= 500:
        return "5xx Server Error"
    return "Unknown"


def status_clause(status: str) -> str:
    """'4xx' matches a status class by prefix, anything else is an exact match."""
    status = status.strip()
    if status.lower().endswith("xx"):
        return f"startswith(status, '{odata_literal(status[0])}')"
    return f"status eq '{odata_literal(status)}'"


def _request_block(raw: Dict[str, Any]) -> str:
    r = ArcRecord(raw, REQUEST_FIELDS)
    text = (f"**Request {r.get('Id', 'Unknown')}**\n"
            f"  Method: {r.get('Method', 'Unknown')}\n"
            f"  URL: {r.get('URL', 'Unknown')}\n"
            f"  Status: {r.get('Status', 'Unknown')}\n"
            f"  User: {r.get('User', 'Unknown')}\n"
            f"  Remote IP: {r.get('RemoteIP', 'Unknown')}\n"
            f"  Timestamp: {format_date(r['Timestamp'])}\n"
            f"  Size: {format_bytes(r.get('Bytes', 0))}\n"
            f"  Time: {format_duration(r['Time'])}\n")
    if r.has("Error"):
        text += f"  Error: {r['Error']}\n"
    if r.has("Script"):
        text += f"  Script: {r['Script']}\n"
    return text


async def list_requests(client: ArcAPIClient, params: ODataQueryInput) -> str:
    requests = await client.list_requests(params.query(default_orderby="Timestamp DESC"))
    if not requests:
        return "No request logs found matching the criteria."
    return f"Found {len(requests)} request logs:\n\n" + "\n".join(_request_block(r) for r in requests)


async def get_request(client: ArcAPIClient, params: RequestIdInput) -> str:
    request = await client.get_request(params.request_id)
    if request is None:
        return f"Request log '{params.request_id}' not found."
    r = ArcRecord(request, REQUEST_FIELDS)
    text = (f"**Request Log Details**\n\n"
            f"**ID:** {r.get('Id', params.request_id)}\n"
            f"**Timestamp:** {format_date(r['Timestamp'])}\n"
            f"**Method:** {r.get('Method', 'Unknown')}\n"
            f"**URL:** {r.get('URL', 'Unknown')}\n"
            f"**Status:** {r.get('Status', 'Unknown')}\n"
            f"**User:** {r.get('User', 'Unknown')}\n"
            f"**Remote IP:** {r.get('RemoteIP', 'Unknown')}\n"
            f"**Size:** {format_bytes(r.get('Bytes', 0))}\n"
            f"**Response Time:** {format_duration(r['Time'])}\n")
    if r.has("Script"):
        text += f"**Script:** {r['Script']}\n"
    if r.has("Error"):
        text += f"**Error:** {r['Error']}\n"
    return text


async def delete_request(client: ArcAPIClient, params: RequestIdInput) -> str:
    await client.delete_request(params.request_id)
    return f"**Request Log Deleted**\n\nRequest log '{params.request_id}' has been permanently deleted."


async def get_requests_count(client: ArcAPIClient, params: CountInput) -> str:
    count = await client.count_requests({"filter": params.filter})
    scope = f" matching filter '{params.filter}'" if params.filter else ""
    return f"**Request Logs Count**\n\nTotal request logs{scope}: **{count}**"


def _tally(records: List[ArcRecord], key) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for r in records:
        label = key(r)
        counts[label] = counts.get(label, 0) + 1
    return counts


async def get_recent_requests(client: ArcAPIClient, params: RecentRequestsInput) -> str:
    method: Optional[str] = params.method.upper() if params.method else None
    filter_expr = join_filters(
        since_filter("Timestamp", params.hours, client.datetime_style, utc_now()),
        f"Method eq '{odata_literal(method)}'" if method else None,
        status_clause(params.status) if params.status else None
    )
    requests = await client.list_requests({"filter": filter_expr, "orderby": "Timestamp DESC", "top": params.top})
    if not requests:
        criteria = f"last {params.hours:g} hours"
        if method:
            criteria += f", method: {method}"
        if params.status:
            criteria += f", status: {params.status}"
        return f"No requests found for criteria: {criteria}."

    records = [ArcRecord(raw, REQUEST_FIELDS) for raw in requests]
    by_status = _tally(records, lambda r: status_range(r["Status"]))
    by_method = _tally(records, lambda r: r.get("Method", "Unknown"))

    text = (f"**Recent HTTP Requests (Last {params.hours:g} hours)**\n\n"
            f"**Total Requests:** {len(records)}\n\n"
            "**Status Summary:**\n")
    text += "".join(f"  {label}: {count}\n" for label, count in by_status.items())
    text += "\n**Method Summary:**\n"
    text += "".join(f"  {label}: {count}\n" for label, count in by_method.items())
    text += "\n**Recent Requests:**\n"
    for r in records[:RECENT_REQUESTS_SHOWN]:
        text += (f"{r.get('Method', 'Unknown')} {r.get('URL', 'Unknown')}\n"
                 f"  Status: {r.get('Status', 'Unknown')} | User: {r.get('User', 'Unknown')} | "
                 f"{format_date(r['Timestamp'])}\n")
        if r.has("Error"):
            text += f"  Error: {r['Error']}\n"
        text += "\n"
    if len(records) > RECENT_REQUESTS_SHOWN:
        text += f"... and {len(records) - RECENT_REQUESTS_SHOWN} more requests\n"
    return text


async def get_error_requests(client: ArcAPIClient, params: ErrorRequestsInput) -> str:
    ranges = [r.strip() for r in params.status_range.split(",") if r.strip()]
    status_expr = "(" + " or ".join(status_clause(r) for r in ranges) + ")" if ranges else None
    filter_expr = join_filters(
        since_filter("Timestamp", params.hours, client.datetime_style, utc_now()),
        status_expr
    )
    requests = await client.list_requests({"filter": filter_expr, "orderby": "Timestamp DESC", "top": params.top})
    if not requests:
        return (f"No error requests found in the last {params.hours:g} hours "
                f"for status range: {params.status_range}.")

    text = (f"**Error Requests (Last {params.hours:g} hours)**\n\n"
            f"**Status Range:** {params.status_range}\n"
            f"**Total Errors:** {len(requests)}\n\n")
    for raw in requests:
        r = ArcRecord(raw, REQUEST_FIELDS)
        text += (f"**{format_date(r['Timestamp'])}**\n"
                 f"  {r.get('Method', 'Unknown')} {r.get('URL', 'Unknown')}\n"
                 f"  Status: {r.get('Status', 'Unknown')}\n"
                 f"  User: {r.get('User', 'Unknown')} | IP: {r.get('RemoteIP', 'Unknown')}\n"
                 f"  Size: {format_bytes(r.get('Bytes', 0))} | Time: {format_duration(r['Time'])}\n")
        if r.has("Error"):
            text += f"  Error: {r['Error']}\n"
        text += "\n"
    return text
