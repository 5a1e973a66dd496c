from typing import Dict, Any, List, Optional, Callable, Awaitable
import os
import sys
import logging
import argparse
from dotenv import load_dotenv
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import BaseModel, ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse
from arc_utils import ArcAPIClient, ArcAPIError, DEFAULT_BASE_URL, DEFAULT_TIMEOUT, DATETIME_STYLES
from arc_models import (ODataQueryInput, CountInput,
                        ConnectorIdInput, CreateConnectorInput, UpdateConnectorInput, CopyConnectorInput,
                        ReceiveFileInput, SendFileInput, SetFlowInput,
                        FileKeyInput, CreateFileInput, UpdateFileInput, FilesByConnectorInput, RecentFilesInput,
                        TransactionIdInput, TransactionPropertyInput, RecentTransactionsInput, LogIdInput,
                        ErrorLogsInput, MessageCountInput, TransactionLogsInput,
                        UpdateProfileInput,
                        WorkspaceIdInput, CreateWorkspaceInput, UpdateWorkspaceInput, WorkspacePropertyInput,
                        SearchWorkspacesInput,
                        VaultIdInput, CreateVaultEntryInput, UpdateVaultEntryInput, VaultPropertyInput,
                        SearchVaultInput,
                        CertificateNameInput, CreateCertificateInput, CreateCertInput, ExchangeCertInput,
                        ReportNameInput, ReportSettingsInput,
                        RequestIdInput, RecentRequestsInput, ErrorRequestsInput,
                        CleanupInput, ExportInput, ImportInput)
import connector_tools
import file_tools
import monitoring_tools
import config_tools
import workspace_tools
import vault_tools
import certificate_tools
import report_tools
import request_tools
import action_tools


logger = logging.getLogger(__name__)

SERVER_NAME = "cdata-arc-mcp-server"
SERVER_VERSION = "1.0.0"

_STATUS_HINTS = {
    401: "Authentication failed. Please check your CDATA_AUTH_TOKEN.",
    403: "Permission denied. Insufficient privileges for this operation.",
    404: "Resource not found. The requested item may not exist.",
    500: "Server error. Please check your CData Arc instance.",
}


def describe_api_error(error: ArcAPIError) -> str:
    """Turn an upstream failure into the text shown to the assistant."""
    if error.status_code in _STATUS_HINTS:
        message = _STATUS_HINTS[error.status_code]
    elif error.status_code is not None:
        message = f"HTTP {error.status_code}: {error.reason or error.message}"
    else:
        message = error.message or "An unexpected error occurred"
    if error.is_structured:
        message += f"\n\n**Error Code:** {error.code}\n**Message:** {error.message}"
    return message


def describe_validation_error(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        problems.append(f"{location}: {item['msg']}" if location else item["msg"])
    return "; ".join(problems)


class ArcMCPServer:
    """Encapsulated MCP server for CData Arc Admin API operations."""
    def __init__(self, client: ArcAPIClient):
        desc = """
            This server manages a CData Arc instance through its Admin API: connectors, files,
            transactions, logs, the application profile, workspaces, vault entries, certificates,
            reports, HTTP request logs and maintenance actions.

            List tools accept OData options (select, filter, orderby, top, skip).
            Filters use OData syntax, e.g. "ConnectorType eq 'AS2'".

            Vault entries are addressed by their Name, not by their Id.
            Check a connector with get_connector before updating it: only properties it already has can be set.
            """
        self.mcp = FastMCP(
                    name = SERVER_NAME,
                    instructions = desc
                    )
        self._client = client
        self._register_tools()
        self._register_routes()

    @property
    def client(self) -> ArcAPIClient:
        return self._client

    async def _run(self, name: str, handler: Callable[..., Awaitable[str]],
                   model_cls: Optional[type] = None, **kwargs: Any) -> str:
        """Validate arguments, run one handler and convert every failure into a ToolError.

        Args:
            name: Tool name, used in logs and error text
            handler: Coroutine function taking (client, params) or (client,)
            model_cls: Input model; None for tools without arguments
            **kwargs: Raw tool arguments; None means "not given"

        Returns:
            The rendered tool output
        """
        logger.info("Tool execution requested: %s", name)
        try:
            if model_cls is None:
                result = await handler(self._client)
            else:
                params: BaseModel = model_cls(**{k: v for k, v in kwargs.items() if v is not None})
                result = await handler(self._client, params)
        except ToolError as e:
            logger.warning("Tool %s reported an error: %s", name, e)
            raise
        except ValidationError as e:
            message = f"Invalid arguments for {name}: {describe_validation_error(e)}"
        except ArcAPIError as e:
            message = describe_api_error(e)
        except Exception as e:
            logger.exception("Unexpected failure in tool %s", name)
            message = str(e) or "An unexpected error occurred"
        else:
            logger.info("Tool %s completed successfully", name)
            return result
        logger.error("Tool %s failed: %s", name, message.splitlines()[0])
        raise ToolError(f"**Error executing {name}**\n\n{message}")

    def _register_tools(self) -> None:
        """Register all MCP tools."""
        self._register_connector_tools()
        self._register_file_tools()
        self._register_monitoring_tools()
        self._register_profile_tools()
        self._register_workspace_tools()
        self._register_vault_tools()
        self._register_certificate_tools()
        self._register_report_tools()
        self._register_request_tools()
        self._register_action_tools()

    def _register_routes(self) -> None:
        """Register the HTTP health check (only served by the http transport)."""

        @self.mcp.custom_route("/health", methods=["GET"])
        async def health(request: Request) -> JSONResponse:
            tools = await self.mcp.get_tools()
            return JSONResponse({
                "status": "healthy",
                "server": SERVER_NAME,
                "version": SERVER_VERSION,
                "arcUrl": self._client.base_url,
                "authConfigured": self._client.auth_configured,
                "tools": len(tools)
            })

    def _register_connector_tools(self) -> None:
        """Register connector tools and connector actions."""

        #######################
        ## Connectors

        @self.mcp.tool()
        async def list_connectors(select: Optional[str] = None, filter: Optional[str] = None,
                                  orderby: Optional[str] = None, top: Optional[int] = None,
                                  skip: Optional[int] = None) -> str:
            """
            **Role**: Lists the connectors configured in CData Arc
            **Inputs**:
            - select: comma-separated properties to include
            - filter: OData filter, e.g. "ConnectorType eq 'AS2'"
            - orderby: sort order, e.g. "ConnectorId ASC"
            - top / skip: paging
            **Outputs**: Count and one block per connector (workspace, type, automation, workers, logging)
            """
            return await self._run("list_connectors", connector_tools.list_connectors, ODataQueryInput,
                                   select=select, filter=filter, orderby=orderby, top=top, skip=skip)

        @self.mcp.tool()
        async def get_connector(connector_id: str) -> str:
            """
            **Role**: Retrieves one connector with its complete configuration
            **Inputs**: connector_id
            **Outputs**: Summary plus the full JSON configuration, or a not found message
            """
            return await self._run("get_connector", connector_tools.get_connector, ConnectorIdInput,
                                   connector_id=connector_id)

        @self.mcp.tool()
        async def create_connector(connector_id: str, connector_type: str, workspace_id: Optional[str] = None,
                                   properties: Optional[Dict[str, Any]] = None) -> str:
            """
            **Role**: Creates a connector
            **Inputs**:
            - connector_id: unique ID of the new connector
            - connector_type: AS2, SFTP, X12, XMLMap, ...
            - workspace_id: workspace to create it in (default workspace when omitted)
            - properties: additional connector properties
            **Outputs**: The created connector, or a notice when the ID is already taken
            """
            return await self._run("create_connector", connector_tools.create_connector, CreateConnectorInput,
                                   connector_id=connector_id, connector_type=connector_type,
                                   workspace_id=workspace_id, properties=properties)

        @self.mcp.tool()
        async def update_connector(connector_id: str, properties: Dict[str, Any]) -> str:
            """
            **Role**: Updates properties of an existing connector
            **Inputs**:
            - connector_id
            - properties: property name -> new value. Only properties the connector already has are applied;
              receiveinterval must be a 5 field cron expression
            **Outputs**: The applied properties and warnings for the ones that were dropped
            """
            return await self._run("update_connector", connector_tools.update_connector, UpdateConnectorInput,
                                   connector_id=connector_id, properties=properties)

        @self.mcp.tool()
        async def delete_connector(connector_id: str) -> str:
            """
            **Role**: Permanently deletes a connector
            **Inputs**: connector_id
            **Outputs**: Confirmation
            """
            return await self._run("delete_connector", connector_tools.delete_connector, ConnectorIdInput,
                                   connector_id=connector_id)

        @self.mcp.tool()
        async def copy_connector(workspace_id: str, connector_id: str, new_connector_id: str,
                                 new_workspace_id: Optional[str] = None) -> str:
            """
            **Role**: Copies a connector, optionally into another workspace
            **Inputs**: workspace_id, connector_id, new_connector_id, new_workspace_id
            **Outputs**: Source, copy and the privileges granted on the copy
            """
            return await self._run("copy_connector", connector_tools.copy_connector, CopyConnectorInput,
                                   workspace_id=workspace_id, connector_id=connector_id,
                                   new_connector_id=new_connector_id, new_workspace_id=new_workspace_id)

        @self.mcp.tool()
        async def receive_file(connector_id: str, workspace_id: Optional[str] = None) -> str:
            """
            **Role**: Triggers the receive action of a connector (e.g. poll an SFTP server)
            **Inputs**: connector_id, workspace_id
            **Outputs**: Received and failed files
            """
            return await self._run("receive_file", connector_tools.receive_file, ReceiveFileInput,
                                   connector_id=connector_id, workspace_id=workspace_id)

        @self.mcp.tool()
        async def send_file(connector_id: str, workspace_id: Optional[str] = None, port_id: Optional[str] = None,
                            message_id: Optional[str] = None, file: Optional[str] = None,
                            subfolder: Optional[str] = None, attachment: Optional[str] = None) -> str:
            """
            **Role**: Sends the files waiting in a connector's Send folder
            **Inputs**:
            - connector_id (required)
            - file / subfolder / message_id: restrict to one file or message
            - attachment: extra file to attach
            - workspace_id, port_id
            **Outputs**: Sent and failed files
            """
            return await self._run("send_file", connector_tools.send_file, SendFileInput,
                                   connector_id=connector_id, workspace_id=workspace_id, port_id=port_id,
                                   message_id=message_id, file=file, subfolder=subfolder, attachment=attachment)

        @self.mcp.tool()
        async def set_flow(workspace_id: str, flows: List[Dict[str, Any]]) -> str:
            """
            **Role**: Sets the connections between connectors of a workspace flow
            **Inputs**:
            - workspace_id
            - flows: list of {"connector_id": source, "connections": [target ID or {"dest": ID, "output": name}]}
            **Outputs**: The connections that were set
            """
            return await self._run("set_flow", connector_tools.set_flow, SetFlowInput,
                                   workspace_id=workspace_id, flows=flows)

    def _register_file_tools(self) -> None:

        #######################
        ## Files

        @self.mcp.tool()
        async def list_files(select: Optional[str] = None, filter: Optional[str] = None,
                             orderby: Optional[str] = None, top: Optional[int] = None,
                             skip: Optional[int] = None) -> str:
            """
            **Role**: Lists files in connector folders
            **Inputs**: OData options, e.g. filter "ConnectorId eq 'AS2_Out' and Folder eq 'Send'"
            **Outputs**: One block per file with folder, message ID, size and creation time
            """
            return await self._run("list_files", file_tools.list_files, ODataQueryInput,
                                   select=select, filter=filter, orderby=orderby, top=top, skip=skip)

        @self.mcp.tool()
        async def get_file(connector_id: str, folder: str, filename: str, message_id: str) -> str:
            """
            **Role**: Retrieves one file by its composite key
            **Inputs**: connector_id, folder, filename, message_id
            **Outputs**: File details or a not found message
            """
            return await self._run("get_file", file_tools.get_file, FileKeyInput, connector_id=connector_id,
                                   folder=folder, filename=filename, message_id=message_id)

        @self.mcp.tool()
        async def create_file(connector_id: str, folder: str, filename: str, message_id: str,
                              content: Optional[str] = None, subfolder: Optional[str] = None,
                              file_path: Optional[str] = None, batch_group_id: Optional[str] = None) -> str:
            """
            **Role**: Places a file in a connector folder
            **Inputs**: connector_id, folder, filename, message_id, content (base64), subfolder, file_path,
            batch_group_id
            **Outputs**: The created file
            """
            return await self._run("create_file", file_tools.create_file, CreateFileInput,
                                   connector_id=connector_id, folder=folder, filename=filename,
                                   message_id=message_id, content=content, subfolder=subfolder,
                                   file_path=file_path, batch_group_id=batch_group_id)

        @self.mcp.tool()
        async def update_file(connector_id: str, folder: str, filename: str, message_id: str,
                              content: Optional[str] = None, subfolder: Optional[str] = None,
                              file_path: Optional[str] = None, batch_group_id: Optional[str] = None) -> str:
            """
            **Role**: Updates a file identified by its composite key
            **Inputs**: the key fields plus at least one of content, subfolder, file_path, batch_group_id
            **Outputs**: The updated fields
            """
            return await self._run("update_file", file_tools.update_file, UpdateFileInput,
                                   connector_id=connector_id, folder=folder, filename=filename,
                                   message_id=message_id, content=content, subfolder=subfolder,
                                   file_path=file_path, batch_group_id=batch_group_id)

        @self.mcp.tool()
        async def delete_file(connector_id: str, folder: str, filename: str, message_id: str) -> str:
            """
            **Role**: Deletes a file
            **Inputs**: connector_id, folder, filename, message_id
            **Outputs**: Confirmation
            """
            return await self._run("delete_file", file_tools.delete_file, FileKeyInput, connector_id=connector_id,
                                   folder=folder, filename=filename, message_id=message_id)

        @self.mcp.tool()
        async def get_files_by_connector(connector_id: str, folder: Optional[str] = None,
                                         orderby: Optional[str] = None, top: Optional[int] = None) -> str:
            """
            **Role**: Lists the files of one connector, newest first
            **Inputs**: connector_id, folder, orderby (default "TimeCreated DESC"), top
            **Outputs**: Files and their total size
            """
            return await self._run("get_files_by_connector", file_tools.get_files_by_connector,
                                   FilesByConnectorInput, connector_id=connector_id, folder=folder,
                                   orderby=orderby, top=top)

        @self.mcp.tool()
        async def get_recent_files(hours: Optional[float] = None, connector_id: Optional[str] = None,
                                   folder: Optional[str] = None, top: Optional[int] = None) -> str:
            """
            **Role**: Shows files created in the last N hours, grouped by connector
            **Inputs**: hours (default 24), connector_id, folder, top
            **Outputs**: Per connector count with the newest files
            """
            return await self._run("get_recent_files", file_tools.get_recent_files, RecentFilesInput,
                                   hours=hours, connector_id=connector_id, folder=folder, top=top)

    def _register_monitoring_tools(self) -> None:
        """Register transaction, log and message tools."""

        #######################
        ## Transactions

        @self.mcp.tool()
        async def list_transactions(select: Optional[str] = None, filter: Optional[str] = None,
                                    orderby: Optional[str] = None, top: Optional[int] = None,
                                    skip: Optional[int] = None) -> str:
            """
            **Role**: Lists transactions (newest first unless orderby is given)
            **Inputs**: OData options, e.g. filter "Status eq 'Error'"
            **Outputs**: One block per transaction with status, connector, file and processing time
            """
            return await self._run("list_transactions", monitoring_tools.list_transactions, ODataQueryInput,
                                   select=select, filter=filter, orderby=orderby, top=top, skip=skip)

        @self.mcp.tool()
        async def get_transaction(transaction_id: str) -> str:
            """
            **Role**: Retrieves one transaction
            **Inputs**: transaction_id
            **Outputs**: Transaction details or a not found message
            """
            return await self._run("get_transaction", monitoring_tools.get_transaction, TransactionIdInput,
                                   transaction_id=transaction_id)

        @self.mcp.tool()
        async def get_recent_transactions(hours: Optional[float] = None, status: Optional[str] = None,
                                          connector_id: Optional[str] = None, top: Optional[int] = None) -> str:
            """
            **Role**: Summarizes the transactions of the last N hours
            **Inputs**: hours (default 24), status, connector_id, top (default 50)
            **Outputs**: Counts by status and the latest transactions of each connector
            """
            return await self._run("get_recent_transactions", monitoring_tools.get_recent_transactions,
                                   RecentTransactionsInput, hours=hours, status=status,
                                   connector_id=connector_id, top=top)

        @self.mcp.tool()
        async def delete_transaction(transaction_id: str) -> str:
            """
            **Role**: Deletes a transaction record
            **Inputs**: transaction_id
            **Outputs**: Confirmation
            """
            return await self._run("delete_transaction", monitoring_tools.delete_transaction, TransactionIdInput,
                                   transaction_id=transaction_id)

        @self.mcp.tool()
        async def get_transactions_count(filter: Optional[str] = None) -> str:
            """
            **Role**: Counts transactions
            **Inputs**: filter (optional OData filter)
            **Outputs**: The count
            """
            return await self._run("get_transactions_count", monitoring_tools.get_transactions_count, CountInput,
                                   filter=filter)

        @self.mcp.tool()
        async def get_transaction_property(transaction_id: str, property_name: str) -> str:
            """
            **Role**: Reads a single property of a transaction
            **Inputs**: transaction_id, property_name
            **Outputs**: The raw property value
            """
            return await self._run("get_transaction_property", monitoring_tools.get_transaction_property,
                                   TransactionPropertyInput, transaction_id=transaction_id,
                                   property_name=property_name)

        #######################
        ## Logs

        @self.mcp.tool()
        async def list_logs(select: Optional[str] = None, filter: Optional[str] = None,
                            orderby: Optional[str] = None, top: Optional[int] = None,
                            skip: Optional[int] = None) -> str:
            """
            **Role**: Lists application log entries (newest first unless orderby is given)
            **Inputs**: OData options
            **Outputs**: One entry per line group with level, connector and message
            """
            return await self._run("list_logs", monitoring_tools.list_logs, ODataQueryInput,
                                   select=select, filter=filter, orderby=orderby, top=top, skip=skip)

        @self.mcp.tool()
        async def get_log(log_id: str) -> str:
            """
            **Role**: Retrieves one log entry
            **Inputs**: log_id
            **Outputs**: Full log entry or a not found message
            """
            return await self._run("get_log", monitoring_tools.get_log, LogIdInput, log_id=log_id)

        @self.mcp.tool()
        async def get_error_logs(hours: Optional[float] = None, connector_id: Optional[str] = None,
                                 top: Optional[int] = None) -> str:
            """
            **Role**: Shows error log entries of the last N hours
            **Inputs**: hours (default 24), connector_id, top (default 20)
            **Outputs**: Error entries, newest first
            """
            return await self._run("get_error_logs", monitoring_tools.get_error_logs, ErrorLogsInput,
                                   hours=hours, connector_id=connector_id, top=top)

        @self.mcp.tool()
        async def delete_log(log_id: str) -> str:
            """
            **Role**: Deletes a log entry
            **Inputs**: log_id
            **Outputs**: Confirmation
            """
            return await self._run("delete_log", monitoring_tools.delete_log, LogIdInput, log_id=log_id)

        #######################
        ## Messages

        @self.mcp.tool()
        async def get_message_count(workspace_id: Optional[str] = None, connector_id: Optional[str] = None,
                                    folder: Optional[str] = None) -> str:
            """
            **Role**: Counts the messages waiting in connector folders
            **Inputs**: workspace_id, connector_id, folder
            **Outputs**: Total and per connector counts
            """
            return await self._run("get_message_count", monitoring_tools.get_message_count, MessageCountInput,
                                   workspace_id=workspace_id, connector_id=connector_id, folder=folder)

        @self.mcp.tool()
        async def get_transaction_logs(message_id: str, direction: str, workspace_id: Optional[str] = None,
                                       connector_id: Optional[str] = None, port_id: Optional[str] = None,
                                       type: Optional[str] = None, include_content: bool = False) -> str:
            """
            **Role**: Retrieves the log files of one message
            **Inputs**: message_id, direction (Send or Receive), workspace_id, connector_id, port_id, type,
            include_content
            **Outputs**: Log files with an optional content preview
            """
            return await self._run("get_transaction_logs", monitoring_tools.get_transaction_logs,
                                   TransactionLogsInput, message_id=message_id, direction=direction,
                                   workspace_id=workspace_id, connector_id=connector_id, port_id=port_id,
                                   type=type, include_content=include_content)

    def _register_profile_tools(self) -> None:

        #######################
        ## Profile

        @self.mcp.tool()
        async def get_profile() -> str:
            """
            **Role**: Shows the application profile (logging, SSO, syslog and other global settings)
            **Inputs**: None
            **Outputs**: Profile settings by section
            """
            return await self._run("get_profile", config_tools.get_profile)

        @self.mcp.tool()
        async def update_profile(properties: Dict[str, Any]) -> str:
            """
            **Role**: Updates global application settings
            **Inputs**: properties: setting name -> value, e.g. {"LogLevel": "Debug"}
            **Outputs**: Applied settings and warnings for suspicious AS2 certificate keys
            """
            return await self._run("update_profile", config_tools.update_profile, UpdateProfileInput,
                                   properties=properties)

    def _register_workspace_tools(self) -> None:

        #######################
        ## Workspaces

        @self.mcp.tool()
        async def list_workspaces(select: Optional[str] = None, filter: Optional[str] = None,
                                  orderby: Optional[str] = None, top: Optional[int] = None,
                                  skip: Optional[int] = None) -> str:
            """
            **Role**: Lists workspaces
            **Inputs**: OData options
            **Outputs**: Workspace IDs with their key email, S3 and performance settings
            """
            return await self._run("list_workspaces", workspace_tools.list_workspaces, ODataQueryInput,
                                   select=select, filter=filter, orderby=orderby, top=top, skip=skip)

        @self.mcp.tool()
        async def get_workspace(workspace_id: str) -> str:
            """
            **Role**: Retrieves one workspace with all its settings
            **Inputs**: workspace_id
            **Outputs**: Settings grouped by section, or a not found message
            """
            return await self._run("get_workspace", workspace_tools.get_workspace, WorkspaceIdInput,
                                   workspace_id=workspace_id)

        @self.mcp.tool()
        async def create_workspace(workspace_id: str, name: Optional[str] = None,
                                   description: Optional[str] = None) -> str:
            """
            **Role**: Creates a workspace
            **Inputs**: workspace_id, name, description
            **Outputs**: The created workspace
            """
            return await self._run("create_workspace", workspace_tools.create_workspace, CreateWorkspaceInput,
                                   workspace_id=workspace_id, name=name, description=description)

        @self.mcp.tool()
        async def update_workspace(workspace_id: str, name: Optional[str] = None, description: Optional[str] = None,
                                   properties: Optional[Dict[str, Any]] = None) -> str:
            """
            **Role**: Updates workspace settings
            **Inputs**: workspace_id, name, description, properties (lowercase setting names)
            **Outputs**: The applied settings
            """
            return await self._run("update_workspace", workspace_tools.update_workspace, UpdateWorkspaceInput,
                                   workspace_id=workspace_id, name=name, description=description,
                                   properties=properties)

        @self.mcp.tool()
        async def delete_workspace(workspace_id: str) -> str:
            """
            **Role**: Permanently deletes a workspace
            **Inputs**: workspace_id
            **Outputs**: Confirmation
            """
            return await self._run("delete_workspace", workspace_tools.delete_workspace, WorkspaceIdInput,
                                   workspace_id=workspace_id)

        @self.mcp.tool()
        async def get_workspaces_count(filter: Optional[str] = None) -> str:
            """
            **Role**: Counts workspaces
            **Inputs**: filter
            **Outputs**: The count
            """
            return await self._run("get_workspaces_count", workspace_tools.get_workspaces_count, CountInput,
                                   filter=filter)

        @self.mcp.tool()
        async def get_workspace_property(workspace_id: str, property_name: str) -> str:
            """
            **Role**: Reads a single workspace setting
            **Inputs**: workspace_id, property_name
            **Outputs**: The raw value
            """
            return await self._run("get_workspace_property", workspace_tools.get_workspace_property,
                                   WorkspacePropertyInput, workspace_id=workspace_id, property_name=property_name)

        @self.mcp.tool()
        async def search_workspaces(search_term: str) -> str:
            """
            **Role**: Finds workspaces whose ID or type contains a term (case-insensitive)
            **Inputs**: search_term
            **Outputs**: Matching workspaces
            """
            return await self._run("search_workspaces", workspace_tools.search_workspaces, SearchWorkspacesInput,
                                   search_term=search_term)

    def _register_vault_tools(self) -> None:

        #######################
        ## Vault

        @self.mcp.tool()
        async def list_vault_entries(select: Optional[str] = None, filter: Optional[str] = None,
                                     orderby: Optional[str] = None, top: Optional[int] = None,
                                     skip: Optional[int] = None) -> str:
            """
            **Role**: Lists vault entries with their values masked
            **Inputs**: OData options (default order "Name ASC")
            **Outputs**: Name, ID, type and tags per entry
            """
            return await self._run("list_vault_entries", vault_tools.list_vault_entries, ODataQueryInput,
                                   select=select, filter=filter, orderby=orderby, top=top, skip=skip)

        @self.mcp.tool()
        async def get_vault_entry(vault_id: str) -> str:
            """
            **Role**: Retrieves a vault entry including its value
            **Inputs**: vault_id: the entry's Name (case-insensitive)
            **Outputs**: The entry, a not found message with suggestions, or the list of ambiguous matches
            """
            return await self._run("get_vault_entry", vault_tools.get_vault_entry, VaultIdInput,
                                   vault_id=vault_id)

        @self.mcp.tool()
        async def create_vault_entry(id: str, name: str, value: str, type: Optional[str] = None,
                                     show_type: Optional[str] = None, tags: Optional[str] = None) -> str:
            """
            **Role**: Creates a vault entry
            **Inputs**: id, name, value, type, show_type, tags
            **Outputs**: The created entry (value masked)
            """
            return await self._run("create_vault_entry", vault_tools.create_vault_entry, CreateVaultEntryInput,
                                   id=id, name=name, value=value, type=type, show_type=show_type, tags=tags)

        @self.mcp.tool()
        async def update_vault_entry(vault_id: str, name: Optional[str] = None, value: Optional[str] = None,
                                     type: Optional[str] = None, show_type: Optional[str] = None,
                                     tags: Optional[str] = None) -> str:
            """
            **Role**: Updates a vault entry found by Name
            **Inputs**: vault_id (entry Name), then any of name, value, type, show_type, tags
            **Outputs**: The updated entry (value masked); nothing is changed when the name is ambiguous
            """
            return await self._run("update_vault_entry", vault_tools.update_vault_entry, UpdateVaultEntryInput,
                                   vault_id=vault_id, name=name, value=value, type=type, show_type=show_type,
                                   tags=tags)

        @self.mcp.tool()
        async def delete_vault_entry(vault_id: str) -> str:
            """
            **Role**: Deletes a vault entry found by Name
            **Inputs**: vault_id (entry Name)
            **Outputs**: Confirmation
            """
            return await self._run("delete_vault_entry", vault_tools.delete_vault_entry, VaultIdInput,
                                   vault_id=vault_id)

        @self.mcp.tool()
        async def get_vault_count(filter: Optional[str] = None) -> str:
            """
            **Role**: Counts vault entries
            **Inputs**: filter
            **Outputs**: The count
            """
            return await self._run("get_vault_count", vault_tools.get_vault_count, CountInput, filter=filter)

        @self.mcp.tool()
        async def get_vault_property(vault_id: str, property_name: str) -> str:
            """
            **Role**: Reads a single property of a vault entry
            **Inputs**: vault_id (entry Id), property_name
            **Outputs**: The raw value
            """
            return await self._run("get_vault_property", vault_tools.get_vault_property, VaultPropertyInput,
                                   vault_id=vault_id, property_name=property_name)

        @self.mcp.tool()
        async def search_vault_by_type(type: str, tags: Optional[str] = None) -> str:
            """
            **Role**: Finds vault entries of a type, optionally with a tag
            **Inputs**: type, tags
            **Outputs**: Matching entries
            """
            return await self._run("search_vault_by_type", vault_tools.search_vault_by_type, SearchVaultInput,
                                   type=type, tags=tags)

    def _register_certificate_tools(self) -> None:

        #######################
        ## Certificates

        @self.mcp.tool()
        async def list_certificates(select: Optional[str] = None, filter: Optional[str] = None,
                                    orderby: Optional[str] = None, top: Optional[int] = None,
                                    skip: Optional[int] = None) -> str:
            """
            **Role**: Lists certificates in the application's certificate store
            **Inputs**: OData options
            **Outputs**: Subject, issuer, expiration and thumbprint per certificate
            """
            return await self._run("list_certificates", certificate_tools.list_certificates, ODataQueryInput,
                                   select=select, filter=filter, orderby=orderby, top=top, skip=skip)

        @self.mcp.tool()
        async def get_certificate(name: str) -> str:
            """
            **Role**: Retrieves one certificate
            **Inputs**: name (certificate file name)
            **Outputs**: Certificate details or a not found message
            """
            return await self._run("get_certificate", certificate_tools.get_certificate, CertificateNameInput,
                                   name=name)

        @self.mcp.tool()
        async def create_certificate(name: str, data: Optional[str] = None, store_type: Optional[str] = None,
                                     connector_ids: Optional[str] = None) -> str:
            """
            **Role**: Uploads a certificate
            **Inputs**: name, data (base64), store_type, connector_ids
            **Outputs**: The stored certificate
            """
            return await self._run("create_certificate", certificate_tools.create_certificate,
                                   CreateCertificateInput, name=name, data=data, store_type=store_type,
                                   connector_ids=connector_ids)

        @self.mcp.tool()
        async def delete_certificate(name: str) -> str:
            """
            **Role**: Deletes a certificate
            **Inputs**: name
            **Outputs**: Confirmation
            """
            return await self._run("delete_certificate", certificate_tools.delete_certificate,
                                   CertificateNameInput, name=name)

        @self.mcp.tool()
        async def create_cert(filename: str, common_name: str, serial_number: str, password: str,
                              organization: Optional[str] = None, organizational_unit: Optional[str] = None,
                              locality: Optional[str] = None, state: Optional[str] = None,
                              country: Optional[str] = None, email: Optional[str] = None,
                              expiration: Optional[int] = None, key_size: Optional[int] = None,
                              signature_algorithm: Optional[str] = None) -> str:
            """
            **Role**: Generates a new self-signed certificate and private key
            **Inputs**:
            - filename, common_name, serial_number, password (required)
            - organization, organizational_unit, locality, state, country, email
            - expiration (years), key_size, signature_algorithm
            **Outputs**: The generated file name and settings
            """
            return await self._run("create_cert", certificate_tools.create_cert, CreateCertInput,
                                   filename=filename, common_name=common_name, serial_number=serial_number,
                                   password=password, organization=organization,
                                   organizational_unit=organizational_unit, locality=locality, state=state,
                                   country=country, email=email, expiration=expiration, key_size=key_size,
                                   signature_algorithm=signature_algorithm)

        @self.mcp.tool()
        async def exchange_cert(certificate: str, exchange_type: str, workspace_id: Optional[str] = None,
                                connector_id: Optional[str] = None, port_id: Optional[str] = None,
                                certificate_password: Optional[str] = None,
                                certificate_usage: Optional[str] = None, response_url: Optional[str] = None,
                                request_id: Optional[str] = None) -> str:
            """
            **Role**: Exchanges a certificate with a trading partner (AS2 or OFTP)
            **Inputs**: certificate, exchange_type, workspace_id, connector_id, port_id, certificate_password,
            certificate_usage, response_url, request_id
            **Outputs**: Exchange result
            """
            return await self._run("exchange_cert", certificate_tools.exchange_cert, ExchangeCertInput,
                                   certificate=certificate, exchange_type=exchange_type, workspace_id=workspace_id,
                                   connector_id=connector_id, port_id=port_id,
                                   certificate_password=certificate_password, certificate_usage=certificate_usage,
                                   response_url=response_url, request_id=request_id)

    def _register_report_tools(self) -> None:

        #######################
        ## Reports

        @self.mcp.tool()
        async def list_reports(select: Optional[str] = None, filter: Optional[str] = None,
                               orderby: Optional[str] = None, top: Optional[int] = None,
                               skip: Optional[int] = None) -> str:
            """
            **Role**: Lists reports
            **Inputs**: OData options
            **Outputs**: Type, owner, format and schedule per report
            """
            return await self._run("list_reports", report_tools.list_reports, ODataQueryInput,
                                   select=select, filter=filter, orderby=orderby, top=top, skip=skip)

        @self.mcp.tool()
        async def get_report(name: str) -> str:
            """
            **Role**: Retrieves a report definition
            **Inputs**: name
            **Outputs**: Data, scheduling and email configuration, or a not found message
            """
            return await self._run("get_report", report_tools.get_report, ReportNameInput, name=name)

        @self.mcp.tool()
        async def create_report(name: str, type: Optional[str] = None, time_period: Optional[str] = None,
                                columns: Optional[str] = None, group_rows: Optional[str] = None,
                                filters: Optional[str] = None, summary: Optional[str] = None,
                                schedule: Optional[str] = None, start_date: Optional[str] = None,
                                end_date: Optional[str] = None, format: Optional[str] = None,
                                email_report: Optional[bool] = None, email_subject: Optional[str] = None,
                                email_recipients: Optional[str] = None) -> str:
            """
            **Role**: Creates a report
            **Inputs**: name plus optional type, time_period, columns, group_rows, filters, summary, schedule,
            start_date, end_date, format, email_report, email_subject, email_recipients
            **Outputs**: The created report
            """
            return await self._run("create_report", report_tools.create_report, ReportSettingsInput,
                                   name=name, type=type, time_period=time_period, columns=columns,
                                   group_rows=group_rows, filters=filters, summary=summary, schedule=schedule,
                                   start_date=start_date, end_date=end_date, format=format,
                                   email_report=email_report, email_subject=email_subject,
                                   email_recipients=email_recipients)

        @self.mcp.tool()
        async def update_report(name: str, type: Optional[str] = None, time_period: Optional[str] = None,
                                columns: Optional[str] = None, group_rows: Optional[str] = None,
                                filters: Optional[str] = None, summary: Optional[str] = None,
                                schedule: Optional[str] = None, start_date: Optional[str] = None,
                                end_date: Optional[str] = None, format: Optional[str] = None,
                                email_report: Optional[bool] = None, email_subject: Optional[str] = None,
                                email_recipients: Optional[str] = None) -> str:
            """
            **Role**: Updates a report
            **Inputs**: name plus at least one setting to change
            **Outputs**: The applied settings
            """
            return await self._run("update_report", report_tools.update_report, ReportSettingsInput,
                                   name=name, type=type, time_period=time_period, columns=columns,
                                   group_rows=group_rows, filters=filters, summary=summary, schedule=schedule,
                                   start_date=start_date, end_date=end_date, format=format,
                                   email_report=email_report, email_subject=email_subject,
                                   email_recipients=email_recipients)

        @self.mcp.tool()
        async def delete_report(name: str) -> str:
            """
            **Role**: Deletes a report
            **Inputs**: name
            **Outputs**: Confirmation
            """
            return await self._run("delete_report", report_tools.delete_report, ReportNameInput, name=name)

    def _register_request_tools(self) -> None:

        #######################
        ## Requests

        @self.mcp.tool()
        async def list_requests(select: Optional[str] = None, filter: Optional[str] = None,
                                orderby: Optional[str] = None, top: Optional[int] = None,
                                skip: Optional[int] = None) -> str:
            """
            **Role**: Lists HTTP request logs (newest first unless orderby is given)
            **Inputs**: OData options
            **Outputs**: Method, URL, status, user and timing per request
            """
            return await self._run("list_requests", request_tools.list_requests, ODataQueryInput,
                                   select=select, filter=filter, orderby=orderby, top=top, skip=skip)

        @self.mcp.tool()
        async def get_request(request_id: str) -> str:
            """
            **Role**: Retrieves one request log
            **Inputs**: request_id
            **Outputs**: Request details or a not found message
            """
            return await self._run("get_request", request_tools.get_request, RequestIdInput, request_id=request_id)

        @self.mcp.tool()
        async def delete_request(request_id: str) -> str:
            """
            **Role**: Deletes a request log
            **Inputs**: request_id
            **Outputs**: Confirmation
            """
            return await self._run("delete_request", request_tools.delete_request, RequestIdInput,
                                   request_id=request_id)

        @self.mcp.tool()
        async def get_requests_count(filter: Optional[str] = None) -> str:
            """
            **Role**: Counts request logs
            **Inputs**: filter, e.g. "Method eq 'GET'"
            **Outputs**: The count
            """
            return await self._run("get_requests_count", request_tools.get_requests_count, CountInput,
                                   filter=filter)

        @self.mcp.tool()
        async def get_recent_requests(hours: Optional[float] = None, method: Optional[str] = None,
                                      status: Optional[str] = None, top: Optional[int] = None) -> str:
            """
            **Role**: Summarizes the HTTP requests of the last N hours
            **Inputs**: hours (default 24), method, status (code such as '404' or class such as '4xx'),
            top (default 50)
            **Outputs**: Counts by status class and method, then the latest requests
            """
            return await self._run("get_recent_requests", request_tools.get_recent_requests, RecentRequestsInput,
                                   hours=hours, method=method, status=status, top=top)

        @self.mcp.tool()
        async def get_error_requests(hours: Optional[float] = None, status_range: Optional[str] = None,
                                     top: Optional[int] = None) -> str:
            """
            **Role**: Shows failed HTTP requests for troubleshooting
            **Inputs**: hours (default 24), status_range (default "4xx,5xx"), top (default 20)
            **Outputs**: Failed requests with user, IP, size and response time
            """
            return await self._run("get_error_requests", request_tools.get_error_requests, ErrorRequestsInput,
                                   hours=hours, status_range=status_range, top=top)

    def _register_action_tools(self) -> None:

        #######################
        ## Maintenance

        @self.mcp.tool()
        async def cleanup_files(type: Optional[str] = None, age: Optional[int] = None,
                                workspace_id: Optional[str] = None, connector_id: Optional[str] = None) -> str:
            """
            **Role**: Archives or deletes old files
            **Inputs**: type (Archive or Delete), age (days), workspace_id, connector_id
            **Outputs**: Scope of the cleanup and the server response
            """
            return await self._run("cleanup_files", action_tools.cleanup_files, CleanupInput,
                                   type=type, age=age, workspace_id=workspace_id, connector_id=connector_id)

        @self.mcp.tool()
        async def export_configuration(workspace_id: Optional[str] = None, connector_id: Optional[str] = None,
                                       password: Optional[str] = None) -> str:
            """
            **Role**: Exports the configuration of the application, a workspace or a connector
            **Inputs**: workspace_id, connector_id, password
            **Outputs**: The base64 arcflow archive
            """
            return await self._run("export_configuration", action_tools.export_configuration, ExportInput,
                                   workspace_id=workspace_id, connector_id=connector_id, password=password)

        @self.mcp.tool()
        async def import_configuration(data: str, password: Optional[str] = None,
                                       overwrite: Optional[bool] = None) -> str:
            """
            **Role**: Imports an arcflow archive
            **Inputs**: data (base64), password, overwrite
            **Outputs**: Confirmation
            """
            return await self._run("import_configuration", action_tools.import_configuration, ImportInput,
                                   data=data, password=password, overwrite=overwrite)

    def run(self, transport: str = 'stdio', host: str = '127.0.0.1', port: int = 3000, path: str = '/mcp') -> None:
        """Run the MCP server.

        Args:
            transport: 'stdio' or 'http' (streamable HTTP with the /health route)
            host: Host to bind the HTTP server to
            port: Port to bind the HTTP server to
            path: URL path for the MCP endpoint
        """
        if transport == 'http':
            logger.info("HTTP server running on %s:%s%s", host, port, path)
            self.mcp.run(transport='streamable-http', host=host, port=port, path=path)
        else:
            logger.info("Starting stdio transport")
            self.mcp.run(transport='stdio')


def main(argv: Optional[List[str]] = None) -> None:
    load_dotenv(override=True)

    parser = argparse.ArgumentParser(description="CData Arc MCP Server")
    parser.add_argument("-arc_url", type=str, default=os.getenv("CDATA_BASE_URL", DEFAULT_BASE_URL),
                        help="Override CDATA_BASE_URL (default: http://localhost:8181/api.rsc)")
    parser.add_argument("-arc_token", type=str, default=os.getenv("CDATA_AUTH_TOKEN"),
                        help="Override CDATA_AUTH_TOKEN (auth token, or user:password for basic auth)")
    parser.add_argument("-transport", type=str, choices=["stdio", "http"],
                        default=os.getenv("MCP_TRANSPORT_MODE", "stdio"), help="Transport (default: stdio)")
    parser.add_argument("-host", type=str, default=os.getenv("MCP_HTTP_HOST", "127.0.0.1"),
                        help="Host to bind the HTTP server to (default: 127.0.0.1)")
    parser.add_argument("-port", type=int, default=int(os.getenv("MCP_HTTP_PORT", "3000")),
                        help="Port to bind the HTTP server to (default: 3000)")
    parser.add_argument("-path", type=str, default=os.getenv("MCP_HTTP_PATH", "/mcp"),
                        help="URL path for the MCP endpoint (default: /mcp)")
    parser.add_argument("-timeout", type=float, default=float(os.getenv("CDATA_TIMEOUT", str(DEFAULT_TIMEOUT))),
                        help="Per-request timeout in seconds (default: 30)")
    parser.add_argument("-datetime_style", type=str, choices=list(DATETIME_STYLES),
                        default=os.getenv("ARC_DATETIME_STYLE", "quoted"),
                        help="How time-window filters write datetimes: quoted or bare (default: quoted)")
    args = parser.parse_args(argv)
    # choices are not applied to environment defaults
    if args.transport not in ("stdio", "http"):
        parser.error(f"unknown transport '{args.transport}' (MCP_TRANSPORT_MODE), expected stdio or http")
    if args.datetime_style not in DATETIME_STYLES:
        parser.error(f"unknown datetime style '{args.datetime_style}' (ARC_DATETIME_STYLE)")

    logging.basicConfig(stream=sys.stderr, level=os.getenv("LOG_LEVEL", "INFO").upper(),
                        format="%(asctime)s - %(levelname)s - %(message)s")
    logger.info("Starting CData Arc MCP Server...")
    logger.info("Arc API URL: %s", args.arc_url)
    logger.info("Auth token configured: %s", "Yes" if args.arc_token else "No")

    client = ArcAPIClient(base_url=args.arc_url, auth_token=args.arc_token, timeout=args.timeout,
                          datetime_style=args.datetime_style)
    server = ArcMCPServer(client)
    try:
        server.run(transport=args.transport, host=args.host, port=args.port, path=args.path)
    finally:
        client.close()


if __name__ == "__main__":
    main()
