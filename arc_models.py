"""
Input models for the CData Arc MCP tools.
Every tool argument set is validated here before any request is sent upstream.
"""
from typing import Dict, Any, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# Identifier arguments are trimmed; values such as secrets, passwords and content are sent as given
_IDENTIFIER_FIELDS = ("connector_id", "new_connector_id", "workspace_id", "new_workspace_id", "vault_id", "id",
                      "name", "transaction_id", "log_id", "request_id", "property_name", "port_id", "message_id")


class ArcInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    @field_validator(*_IDENTIFIER_FIELDS, mode="before", check_fields=False)
    @classmethod
    def strip_identifier(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class ODataQueryInput(ArcInput):
    """Common OData query options accepted by every list tool."""

    select: Optional[str] = Field(default=None, description="Comma-separated list of properties to include")
    filter: Optional[str] = Field(default=None, description="OData filter expression")
    orderby: Optional[str] = Field(default=None, description="Order results by property (e.g. 'Name ASC')")
    top: Optional[int] = Field(default=None, description="Maximum number of results to return", gt=0)
    skip: Optional[int] = Field(default=None, description="Number of results to skip", ge=0)

    def query(self, default_orderby: Optional[str] = None) -> Dict[str, Any]:
        options = self.model_dump(include={"select", "filter", "orderby", "top", "skip"})
        if not options["orderby"] and default_orderby:
            options["orderby"] = default_orderby
        return options


class CountInput(ArcInput):
    filter: Optional[str] = Field(default=None, description="OData filter expression")


#######################
## Connectors

class ConnectorIdInput(ArcInput):
    connector_id: str = Field(..., description="Connector ID", min_length=1)


class CreateConnectorInput(ArcInput):
    connector_id: str = Field(..., description="Unique ID for the new connector", min_length=1)
    connector_type: str = Field(..., description="Connector type (e.g. AS2, SFTP, X12)", min_length=1)
    workspace_id: Optional[str] = Field(default=None, description="Workspace the connector belongs to")
    properties: Optional[Dict[str, Any]] = Field(default=None, description="Additional connector properties")


class UpdateConnectorInput(ArcInput):
    connector_id: str = Field(..., description="Connector ID", min_length=1)
    properties: Dict[str, Any] = Field(..., description="Properties to update, keyed by property name")

    @field_validator("properties")
    @classmethod
    def validate_properties(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        if not value:
            raise ValueError("At least one property is required")
        return value


class CopyConnectorInput(ArcInput):
    workspace_id: str = Field(..., description="Workspace of the source connector", min_length=1)
    connector_id: str = Field(..., description="Connector to copy", min_length=1)
    new_connector_id: str = Field(..., description="ID for the copy", min_length=1)
    new_workspace_id: Optional[str] = Field(default=None, description="Workspace for the copy (default: same workspace)")


class ReceiveFileInput(ArcInput):
    connector_id: str = Field(..., description="Connector to trigger the receive action for", min_length=1)
    workspace_id: Optional[str] = Field(default=None, description="Workspace ID")


class SendFileInput(ArcInput):
    connector_id: str = Field(..., description="Connector to send with", min_length=1)
    workspace_id: Optional[str] = Field(default=None, description="Workspace ID")
    port_id: Optional[str] = Field(default=None, description="Port ID")
    message_id: Optional[str] = Field(default=None, description="Message ID to send")
    file: Optional[str] = Field(default=None, description="Specific file in the Send folder")
    subfolder: Optional[str] = Field(default=None, description="Subfolder of the file")
    attachment: Optional[str] = Field(default=None, description="Attachment file to send with the message")


class FlowConnection(ArcInput):
    dest: str = Field(..., description="Destination connector ID", min_length=1)
    output: Optional[str] = Field(default=None, description="Named output of the source connector")


class ConnectorFlow(ArcInput):
    connector_id: str = Field(..., description="Source connector ID", min_length=1)
    connections: List[Union[str, FlowConnection]] = Field(
        ..., description="Destination connector IDs, or {dest, output} objects"
    )


class SetFlowInput(ArcInput):
    workspace_id: str = Field(..., description="Workspace ID", min_length=1)
    flows: List[ConnectorFlow] = Field(..., description="Connections per source connector", min_length=1)


#######################
## Files

class FileKeyInput(ArcInput):
    connector_id: str = Field(..., description="Connector ID", min_length=1)
    folder: str = Field(..., description="Folder (Send, Receive, Sent, ...)", min_length=1)
    filename: str = Field(..., description="File name", min_length=1)
    message_id: str = Field(..., description="Message ID", min_length=1)


class FileContentInput(FileKeyInput):
    subfolder: Optional[str] = Field(default=None, description="Subfolder inside the folder")
    content: Optional[str] = Field(default=None, description="Base64 encoded file content")
    file_path: Optional[str] = Field(default=None, description="Full path of the file")
    batch_group_id: Optional[str] = Field(default=None, description="Batch group identifier for related files")

    def changes(self) -> Dict[str, Any]:
        names = {"subfolder": "Subfolder", "content": "Content", "file_path": "FilePath",
                 "batch_group_id": "BatchGroupId"}
        return {names[k]: v for k, v in self.model_dump(include=set(names)).items() if v is not None}


class CreateFileInput(FileContentInput):
    pass


class UpdateFileInput(FileContentInput):
    @model_validator(mode="after")
    def validate_changes(self) -> "UpdateFileInput":
        if not self.changes():
            raise ValueError("Specify at least one of subfolder, content, file_path or batch_group_id")
        return self


class FilesByConnectorInput(ArcInput):
    connector_id: str = Field(..., description="Connector ID", min_length=1)
    folder: Optional[str] = Field(default=None, description="Restrict to one folder")
    orderby: str = Field(default="TimeCreated DESC", description="Sort order")
    top: Optional[int] = Field(default=None, description="Maximum number of files", gt=0)


class RecentFilesInput(ArcInput):
    hours: float = Field(default=24, description="Look back this many hours", gt=0)
    connector_id: Optional[str] = Field(default=None, description="Restrict to one connector")
    folder: Optional[str] = Field(default=None, description="Restrict to one folder")
    top: Optional[int] = Field(default=None, description="Maximum number of files", gt=0)


#######################
## Monitoring

class TransactionIdInput(ArcInput):
    transaction_id: str = Field(..., description="Transaction ID", min_length=1)


class TransactionPropertyInput(TransactionIdInput):
    property_name: str = Field(..., description="Property to read (e.g. Status)", min_length=1)


class RecentTransactionsInput(ArcInput):
    hours: float = Field(default=24, description="Look back this many hours", gt=0)
    status: Optional[str] = Field(default=None, description="Only transactions with this status")
    connector_id: Optional[str] = Field(default=None, description="Only transactions of this connector")
    top: int = Field(default=50, description="Maximum number of transactions", gt=0)


class LogIdInput(ArcInput):
    log_id: str = Field(..., description="Log entry ID", min_length=1)


class ErrorLogsInput(ArcInput):
    hours: float = Field(default=24, description="Look back this many hours", gt=0)
    connector_id: Optional[str] = Field(default=None, description="Only errors of this connector")
    top: int = Field(default=20, description="Maximum number of log entries", gt=0)


class MessageCountInput(ArcInput):
    workspace_id: Optional[str] = Field(default=None, description="Workspace ID")
    connector_id: Optional[str] = Field(default=None, description="Connector ID")
    folder: Optional[str] = Field(default=None, description="Folder to count (default Send)")


class TransactionLogsInput(ArcInput):
    message_id: str = Field(..., description="Message ID of the transaction", min_length=1)
    direction: str = Field(..., description="Send or Receive", min_length=1)
    workspace_id: Optional[str] = Field(default=None, description="Workspace ID")
    connector_id: Optional[str] = Field(default=None, description="Connector ID")
    port_id: Optional[str] = Field(default=None, description="Port ID")
    type: Optional[str] = Field(default=None, description="Only logs of this type")
    include_content: bool = Field(default=False, description="Include log file content")


#######################
## Profile

class UpdateProfileInput(ArcInput):
    properties: Dict[str, Any] = Field(..., description="Profile settings to update, keyed by property name")

    @field_validator("properties")
    @classmethod
    def validate_properties(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        if not value:
            raise ValueError("At least one profile property is required")
        return value


#######################
## Workspaces

class WorkspaceIdInput(ArcInput):
    workspace_id: str = Field(..., description="Workspace ID", min_length=1)


class CreateWorkspaceInput(ArcInput):
    workspace_id: str = Field(..., description="Unique ID for the new workspace", min_length=1)
    name: Optional[str] = Field(default=None, description="Display name")
    description: Optional[str] = Field(default=None, description="Description")


class UpdateWorkspaceInput(ArcInput):
    workspace_id: str = Field(..., description="Workspace ID", min_length=1)
    name: Optional[str] = Field(default=None, description="New display name")
    description: Optional[str] = Field(default=None, description="New description")
    properties: Optional[Dict[str, Any]] = Field(default=None, description="Other workspace settings (lowercase names)")


class WorkspacePropertyInput(WorkspaceIdInput):
    property_name: str = Field(..., description="Property to read", min_length=1)


class SearchWorkspacesInput(ArcInput):
    search_term: str = Field(..., description="Text to look for in the workspace ID or type", min_length=1)


#######################
## Vault

class VaultIdInput(ArcInput):
    vault_id: str = Field(..., description="Name of the vault entry (matched case-insensitively)", min_length=1)


class CreateVaultEntryInput(ArcInput):
    id: str = Field(..., description="Unique ID for the entry", min_length=1)
    name: str = Field(..., description="Name of the entry", min_length=1)
    value: str = Field(..., description="Secret value")
    type: Optional[str] = Field(default=None, description="Entry type (e.g. Password, Text)")
    show_type: Optional[str] = Field(default=None, description="Display type")
    tags: Optional[str] = Field(default=None, description="Comma-separated tags")


class UpdateVaultEntryInput(VaultIdInput):
    name: Optional[str] = Field(default=None, description="New name")
    value: Optional[str] = Field(default=None, description="New secret value")
    type: Optional[str] = Field(default=None, description="New type")
    show_type: Optional[str] = Field(default=None, description="New display type")
    tags: Optional[str] = Field(default=None, description="New tags")


class VaultPropertyInput(ArcInput):
    vault_id: str = Field(..., description="Vault entry ID", min_length=1)
    property_name: str = Field(..., description="Property to read", min_length=1)


class SearchVaultInput(ArcInput):
    type: str = Field(..., description="Entry type to look for", min_length=1)
    tags: Optional[str] = Field(default=None, description="Tag the entries must contain")


#######################
## Certificates

class CertificateNameInput(ArcInput):
    name: str = Field(..., description="Certificate file name", min_length=1)


class CreateCertificateInput(ArcInput):
    name: str = Field(..., description="Certificate file name", min_length=1)
    data: Optional[str] = Field(default=None, description="Base64 encoded certificate content")
    store_type: Optional[str] = Field(default=None, description="Store type (e.g. PEMKEY_FILE, PFX)")
    connector_ids: Optional[str] = Field(default=None, description="Comma-separated connectors that use the certificate")


class CreateCertInput(ArcInput):
    filename: str = Field(..., description="Certificate file name", min_length=1)
    common_name: str = Field(..., description="Common name of the subject", min_length=1)
    serial_number: str = Field(..., description="Serial number", min_length=1)
    password: str = Field(..., description="Password protecting the private key", min_length=1)
    organization: Optional[str] = Field(default=None, description="Organization")
    organizational_unit: Optional[str] = Field(default=None, description="Organizational unit")
    locality: Optional[str] = Field(default=None, description="City")
    state: Optional[str] = Field(default=None, description="State or province")
    country: Optional[str] = Field(default=None, description="Country")
    email: Optional[str] = Field(default=None, description="Email address")
    expiration: Optional[int] = Field(default=None, description="Validity in years", gt=0)
    key_size: Optional[int] = Field(default=None, description="Key size in bits", gt=0)
    signature_algorithm: Optional[str] = Field(default=None, description="Signature algorithm (e.g. SHA256)")


class ExchangeCertInput(ArcInput):
    certificate: str = Field(..., description="Certificate to exchange", min_length=1)
    exchange_type: str = Field(..., description="AS2 (Request, Response) or OFTP (Deliver, Request, Replace)", min_length=1)
    workspace_id: Optional[str] = Field(default=None, description="Workspace ID")
    connector_id: Optional[str] = Field(default=None, description="Connector ID")
    port_id: Optional[str] = Field(default=None, description="Port ID")
    certificate_password: Optional[str] = Field(default=None, description="Certificate password (AS2)")
    certificate_usage: Optional[str] = Field(default=None, description="Encryption,Verification,ServerTLS,ClientTLS (AS2)")
    response_url: Optional[str] = Field(default=None, description="URL the response is sent to (AS2)")
    request_id: Optional[str] = Field(default=None, description="Request ID (AS2)")


#######################
## Reports

class ReportNameInput(ArcInput):
    name: str = Field(..., description="Report name", min_length=1)


class ReportSettingsInput(ArcInput):
    name: str = Field(..., description="Report name", min_length=1)
    type: Optional[str] = Field(default=None, description="Report type (e.g. Summary, Detailed, Transaction)")
    time_period: Optional[str] = Field(default=None, description="Time period in days")
    columns: Optional[str] = Field(default=None, description="Comma-separated columns")
    group_rows: Optional[str] = Field(default=None, description="Columns to group by")
    filters: Optional[str] = Field(default=None, description="Filter criteria")
    summary: Optional[str] = Field(default=None, description="Summary information")
    schedule: Optional[str] = Field(default=None, description="Cron schedule")
    start_date: Optional[str] = Field(default=None, description="Schedule start date (ISO)")
    end_date: Optional[str] = Field(default=None, description="Schedule end date (ISO)")
    format: Optional[str] = Field(default=None, description="Output format (PDF, CSV, ...)")
    email_report: Optional[bool] = Field(default=None, description="Email the report")
    email_subject: Optional[str] = Field(default=None, description="Email subject")
    email_recipients: Optional[str] = Field(default=None, description="Comma-separated recipients")

    def changes(self) -> Dict[str, Any]:
        """Set fields in upstream (PascalCase) spelling, excluding the name."""
        names = {
            "type": "Type", "time_period": "TimePeriod", "columns": "Columns", "group_rows": "GroupRows",
            "filters": "Filters", "summary": "Summary", "schedule": "Schedule", "start_date": "StartDate",
            "end_date": "EndDate", "format": "Format", "email_report": "EmailReport",
            "email_subject": "EmailSubject", "email_recipients": "EmailRecipients",
        }
        return {names[k]: v for k, v in self.model_dump(exclude={"name"}).items() if v is not None}


#######################
## Requests

class RequestIdInput(ArcInput):
    request_id: str = Field(..., description="Request ID", min_length=1)


class RecentRequestsInput(ArcInput):
    hours: float = Field(default=24, description="Look back this many hours", gt=0)
    method: Optional[str] = Field(default=None, description="HTTP method (GET, POST, ...)")
    status: Optional[str] = Field(default=None, description="Status code or range such as 4xx")
    top: int = Field(default=50, description="Maximum number of requests", gt=0)


class ErrorRequestsInput(ArcInput):
    hours: float = Field(default=24, description="Look back this many hours", gt=0)
    status_range: str = Field(default="4xx,5xx", description="Comma-separated ranges or codes", min_length=1)
    top: int = Field(default=20, description="Maximum number of requests", gt=0)


#######################
## Actions

class CleanupInput(ArcInput):
    type: Optional[str] = Field(default=None, description="Archive or Delete; the server default when omitted",
                                pattern="^(Archive|Delete)$")
    age: Optional[int] = Field(default=None, description="Minimum age in days of the files to clean up", ge=0)
    workspace_id: Optional[str] = Field(default=None, description="Restrict to one workspace")
    connector_id: Optional[str] = Field(default=None, description="Restrict to one connector")


class ExportInput(ArcInput):
    workspace_id: Optional[str] = Field(default=None, description="Workspace to export")
    connector_id: Optional[str] = Field(default=None, description="Connector to export")
    password: Optional[str] = Field(default=None, description="Password protecting the exported archive")


class ImportInput(ArcInput):
    data: str = Field(..., description="Base64 encoded arcflow archive", min_length=1)
    password: Optional[str] = Field(default=None, description="Password of the archive")
    overwrite: Optional[bool] = Field(default=None, description="Overwrite existing items")
