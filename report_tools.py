"""
Report tools.
"""
from typing import Dict, Any
from fastmcp.exceptions import ToolError
from arc_utils import ArcAPIClient, ArcRecord, REPORT_FIELDS, format_date, is_true, yes_no
from arc_models import ODataQueryInput, ReportNameInput, ReportSettingsInput


def format_report_type(value: Any) -> str:
    if not value:
        return "Unknown"
    value = str(value)
    return value[:1].upper() + value[1:]


def _report_block(raw: Dict[str, Any]) -> str:
    r = ArcRecord(raw, REPORT_FIELDS)
    text = (f"**{r.get('Name', 'Unnamed Report')}**\n"
            f"  Type: {format_report_type(r['Type'])}\n"
            f"  Created by: {r.get('CreatedBy', 'Unknown')}\n"
            f"  Modified: {format_date(r['ModifiedTime'])}\n"
            f"  Format: {r.get('Format', 'Default')}\n"
            f"  Email Reports: {yes_no(r['EmailReport'])}\n")
    if r.has("Schedule"):
        text += f"  Schedule: {r['Schedule']}\n"
    if r.has("TimePeriod"):
        text += f"  Time Period: {r['TimePeriod']} days\n"
    return text


async def list_reports(client: ArcAPIClient, params: ODataQueryInput) -> str:
    reports = await client.list_reports(params.query())
    if not reports:
        return "No reports found matching the criteria."
    return f"**Found {len(reports)} reports:**\n\n" + "\n".join(_report_block(r) for r in reports)


async def get_report(client: ArcAPIClient, params: ReportNameInput) -> str:
    report = await client.get_report(params.name)
    if report is None:
        return f"Report '{params.name}' not found."
    r = ArcRecord(report, REPORT_FIELDS)
    text = (f"**Report Details: {r.get('Name', params.name)}**\n\n"
            f"**Basic Information:**\n"
            f"  • Type: {format_report_type(r['Type'])}\n"
            f"  • Created by: {r.get('CreatedBy', 'Unknown')}\n"
            f"  • Created: {format_date(r['CreatedTime'])}\n"
            f"  • Modified: {format_date(r['ModifiedTime'])}\n"
            f"  • Format: {r.get('Format', 'Default')}\n\n"
            f"**Data Configuration:**\n"
            f"  • Time Period: {str(r['TimePeriod']) + ' days' if r.has('TimePeriod') else 'Not set'}\n"
            f"  • Columns: {r.get('Columns', 'Default columns')}\n"
            f"  • Group By: {r.get('GroupRows', 'No grouping')}\n"
            f"  • Filters: {r.get('Filters', 'No filters')}\n"
            f"  • Summary: {r.get('Summary', 'No summary')}\n")
    if r.has("TimePeriodStart") or r.has("TimePeriodEnd"):
        text += (f"  • Period: {format_date(r['TimePeriodStart'])} to "
                 f"{format_date(r['TimePeriodEnd'])}\n")
    text += (f"\n**Scheduling:**\n"
             f"  • Schedule: {r.get('Schedule', 'Not scheduled')}\n")
    if r.has("StartDate"):
        text += f"  • Start Date: {format_date(r['StartDate'])}\n"
    if r.has("EndDate"):
        text += f"  • End Date: {format_date(r['EndDate'])}\n"
    text += (f"\n**Email Configuration:**\n"
             f"  • Email Reports: {yes_no(r['EmailReport'])}\n")
    if is_emailed(r):
        text += (f"  • Subject: {r.get('EmailSubject', 'Not set')}\n"
                 f"  • Recipients: {r.get('EmailRecipients', 'Not set')}\n")
    return text


def is_emailed(r: ArcRecord) -> bool:
    return is_true(r["EmailReport"])


async def create_report(client: ArcAPIClient, params: ReportSettingsInput) -> str:
    body = {"Name": params.name, **params.changes()}
    r = ArcRecord({**body, **(await client.create_report(body) or {})}, REPORT_FIELDS)
    text = (f"**Report Created**\n\n"
            f"**Name:** {r.get('Name', params.name)}\n"
            f"**Type:** {format_report_type(r['Type'])}\n"
            f"**Format:** {r.get('Format', 'Default')}\n")
    if r.has("TimePeriod"):
        text += f"**Time Period:** {r['TimePeriod']} days\n"
    if r.has("Schedule"):
        text += f"**Schedule:** {r['Schedule']}\n"
    if is_emailed(r):
        text += f"**Email Recipients:** {r.get('EmailRecipients', 'Not set')}\n"
    return text


async def update_report(client: ArcAPIClient, params: ReportSettingsInput) -> str:
    changes = params.changes()
    if not changes:
        raise ToolError("No update fields provided. Specify at least one report setting to change.")
    await client.update_report(params.name, changes)
    return (f"**Report Updated**\n\n**Name:** {params.name}\n\n**Updated settings:**\n"
            + "\n".join(f"  • {key}: {value}" for key, value in changes.items()))


async def delete_report(client: ArcAPIClient, params: ReportNameInput) -> str:
    await client.delete_report(params.name)
    return f"**Report Deleted**\n\nReport '{params.name}' has been permanently deleted."
