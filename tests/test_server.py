# tests/test_server.py
import os
import unittest
from unittest.mock import AsyncMock, patch

from fastmcp import Client
from starlette.testclient import TestClient

import arc_mcp_server
from arc_mcp_server import ArcMCPServer, describe_api_error
from arc_utils import ArcAPIClient, ArcAPIError


def make_client():
    client = AsyncMock(spec=ArcAPIClient)
    client.base_url = "http://arc.local:8181/api.rsc"
    client.auth_configured = True
    client.datetime_style = "quoted"
    return client


class TestDescribeApiError(unittest.TestCase):
    def test_known_status_uses_hint(self):
        text = describe_api_error(ArcAPIError("Unauthorized", status_code=401, reason="Unauthorized"))
        self.assertEqual(text, "Authentication failed. Please check your CDATA_AUTH_TOKEN.")

    def test_other_status_uses_reason(self):
        text = describe_api_error(ArcAPIError("Conflict", status_code=409, reason="Conflict"))
        self.assertEqual(text, "HTTP 409: Conflict")

    def test_structured_error_appends_code(self):
        error = ArcAPIError("Connector already exists", status_code=400, reason="Bad Request", code="DUPLICATE")
        text = describe_api_error(error)
        self.assertTrue(text.startswith("HTTP 400: Bad Request"))
        self.assertIn("**Error Code:** DUPLICATE", text)
        self.assertIn("**Message:** Connector already exists", text)

    def test_transport_failure(self):
        self.assertEqual(describe_api_error(ArcAPIError("Connection refused")), "Connection refused")


class TestToolBoundary(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.arc = make_client()
        self.server = ArcMCPServer(self.arc)

    async def test_tools_are_registered(self):
        async with Client(self.server.mcp) as mcp_client:
            names = {tool.name for tool in await mcp_client.list_tools()}
        for name in ("list_connectors", "set_flow", "get_recent_files", "get_transaction_logs", "update_profile",
                     "search_workspaces", "search_vault_by_type", "exchange_cert", "update_report",
                     "get_error_requests", "import_configuration"):
            self.assertIn(name, names)

    async def test_success_returns_text(self):
        self.arc.get_connector.return_value = None
        async with Client(self.server.mcp) as mcp_client:
            result = await mcp_client.call_tool("get_connector", {"connector_id": "AS2_Out"})
        self.assertFalse(result.is_error)
        self.assertEqual(result.content[0].text, "Connector 'AS2_Out' not found.")

    async def test_api_error_becomes_error_result(self):
        self.arc.list_connectors.side_effect = ArcAPIError("Unauthorized", status_code=401, reason="Unauthorized")
        async with Client(self.server.mcp) as mcp_client:
            result = await mcp_client.call_tool("list_connectors", {}, raise_on_error=False)
        self.assertTrue(result.is_error)
        self.assertIn("**Error executing list_connectors**", result.content[0].text)
        self.assertIn("CDATA_AUTH_TOKEN", result.content[0].text)

    async def test_invalid_arguments_become_error_result(self):
        async with Client(self.server.mcp) as mcp_client:
            result = await mcp_client.call_tool("list_connectors", {"top": 0}, raise_on_error=False)
        self.assertTrue(result.is_error)
        self.assertIn("Invalid arguments for list_connectors", result.content[0].text)
        self.arc.list_connectors.assert_not_awaited()

    async def test_unexpected_exception_is_contained(self):
        self.arc.get_profile.side_effect = RuntimeError("boom")
        async with Client(self.server.mcp) as mcp_client:
            result = await mcp_client.call_tool("get_profile", {}, raise_on_error=False)
        self.assertTrue(result.is_error)
        self.assertIn("boom", result.content[0].text)


class TestHealthRoute(unittest.TestCase):
    def test_health(self):
        server = ArcMCPServer(make_client())
        response = TestClient(server.mcp.http_app()).get("/health")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "healthy")
        self.assertEqual(body["server"], "cdata-arc-mcp-server")
        self.assertEqual(body["arcUrl"], "http://arc.local:8181/api.rsc")
        self.assertTrue(body["authConfigured"])
        self.assertGreater(body["tools"], 60)


class TestMain(unittest.TestCase):
    @patch("arc_mcp_server.load_dotenv")
    @patch("arc_mcp_server.ArcMCPServer")
    @patch("arc_mcp_server.ArcAPIClient")
    def test_environment_and_flags(self, client_cls, server_cls, _dotenv):
        env = {"CDATA_BASE_URL": "http://env:8181/api.rsc", "CDATA_AUTH_TOKEN": "tok", "MCP_TRANSPORT_MODE": "http"}
        with patch.dict(os.environ, env, clear=True):
            arc_mcp_server.main(["-port", "4000", "-datetime_style", "bare"])
        client_cls.assert_called_once_with(base_url="http://env:8181/api.rsc", auth_token="tok", timeout=30.0,
                                           datetime_style="bare")
        server_cls.return_value.run.assert_called_once_with(transport="http", host="127.0.0.1", port=4000,
                                                            path="/mcp")
        client_cls.return_value.close.assert_called_once_with()

    @patch("arc_mcp_server.load_dotenv")
    def test_invalid_transport_from_environment(self, _dotenv):
        with patch.dict(os.environ, {"MCP_TRANSPORT_MODE": "websocket"}, clear=True):
            with self.assertRaises(SystemExit):
                arc_mcp_server.main([])


if __name__ == "__main__":
    unittest.main()
