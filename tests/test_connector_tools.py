# tests/test_connector_tools.py
import unittest
from unittest.mock import AsyncMock

from fastmcp.exceptions import ToolError

import connector_tools
from arc_models import (ODataQueryInput, ConnectorIdInput, CreateConnectorInput, UpdateConnectorInput,
                        CopyConnectorInput, ReceiveFileInput, SendFileInput, SetFlowInput)
from arc_utils import ArcAPIClient, ArcAPIError


def make_client():
    client = AsyncMock(spec=ArcAPIClient)
    client.datetime_style = "quoted"
    return client


class TestConnectorUpdateFiltering(unittest.TestCase):
    def test_unknown_properties_are_dropped_with_warning(self):
        changes, warnings = connector_tools.filter_connector_update(
            {"host": "old", "port": 22, "automationsend": "true"}, {"host": "x", "bogus": "y"})
        self.assertEqual(changes, {"host": "x"})
        self.assertEqual(len(warnings), 1)
        self.assertIn("bogus", warnings[0])

    def test_live_spelling_is_kept(self):
        changes, _ = connector_tools.filter_connector_update({"ReceiveFolder": "a"}, {"receivefolder": "b"})
        self.assertEqual(changes, {"ReceiveFolder": "b"})

    def test_receive_interval_must_be_five_fields(self):
        live = {"receiveinterval": "0 * * * *"}
        changes, warnings = connector_tools.filter_connector_update(live, {"receiveinterval": "0 2 * * *"})
        self.assertEqual(changes, {"receiveinterval": "0 2 * * *"})
        self.assertEqual(warnings, [])

        changes, warnings = connector_tools.filter_connector_update(live, {"receiveinterval": "daily"})
        self.assertEqual(changes, {})
        self.assertEqual(len(warnings), 1)
        self.assertIn("cron", warnings[0])

    def test_did_you_mean(self):
        _, warnings = connector_tools.filter_connector_update({"LogLevel": "Info"}, {"LogLevl": "Debug"})
        self.assertIn("did you mean 'LogLevel'", warnings[0])


class TestConnectorTools(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.client = make_client()

    async def test_list_connectors_renders_blocks(self):
        self.client.list_connectors.return_value = [
            {"ConnectorId": "AS2_Out", "ConnectorType": "AS2", "Workspace": "Default"},
            {"connectorid": "AS2_In", "connectortype": "AS2"},
        ]
        params = ODataQueryInput(filter="ConnectorType eq 'AS2'", top=5)
        text = await connector_tools.list_connectors(self.client, params)
        self.assertIn("Found 2 connectors", text)
        self.assertIn("**AS2_Out**", text)
        self.assertIn("**AS2_In**", text)
        query = self.client.list_connectors.call_args.args[0]
        self.assertEqual(query["filter"], "ConnectorType eq 'AS2'")
        self.assertEqual(query["top"], 5)

    async def test_list_connectors_empty(self):
        self.client.list_connectors.return_value = []
        text = await connector_tools.list_connectors(self.client, ODataQueryInput())
        self.assertTrue(text.startswith("No connectors found"))

    async def test_get_connector_not_found(self):
        self.client.get_connector.return_value = None
        text = await connector_tools.get_connector(self.client, ConnectorIdInput(connector_id="nope"))
        self.assertEqual(text, "Connector 'nope' not found.")

    async def test_get_connector_includes_json(self):
        self.client.get_connector.return_value = {"ConnectorId": "SFTP1", "ConnectorType": "SFTP", "port": 22}
        text = await connector_tools.get_connector(self.client, ConnectorIdInput(connector_id="SFTP1"))
        self.assertIn("**Type:** SFTP", text)
        self.assertIn('"port": 22', text)

    async def test_create_connector_body(self):
        self.client.create_connector.return_value = {"ConnectorId": "New", "ConnectorType": "SFTP"}
        params = CreateConnectorInput(connector_id="New", connector_type="SFTP", workspace_id="WS",
                                      properties={"host": "example.com"})
        text = await connector_tools.create_connector(self.client, params)
        self.client.create_connector.assert_awaited_once_with(
            {"host": "example.com", "connectorid": "New", "connectortype": "SFTP", "workspace": "WS"})
        self.assertIn("Connector Created Successfully", text)

    async def test_create_connector_duplicate(self):
        self.client.create_connector.side_effect = ArcAPIError(
            "Connector 'New' already exists.", status_code=400, code="CreateConnector")
        params = CreateConnectorInput(connector_id="New", connector_type="SFTP")
        text = await connector_tools.create_connector(self.client, params)
        self.assertIn("Connector Already Exists", text)

    async def test_create_connector_other_error_propagates(self):
        self.client.create_connector.side_effect = ArcAPIError("HTTP 500: boom", status_code=500)
        with self.assertRaises(ArcAPIError):
            await connector_tools.create_connector(
                self.client, CreateConnectorInput(connector_id="New", connector_type="SFTP"))

    async def test_update_connector_sends_only_known_properties(self):
        self.client.get_connector.return_value = {"host": "old", "port": 22, "automationsend": "true"}
        self.client.update_connector.return_value = {}
        params = UpdateConnectorInput(connector_id="SFTP1", properties={"host": "x", "bogus": "y"})
        text = await connector_tools.update_connector(self.client, params)
        self.client.update_connector.assert_awaited_once_with("SFTP1", {"host": "x"})
        self.assertIn("bogus", text)
        self.assertIn("Successfully Updated Properties", text)

    async def test_update_connector_nothing_valid(self):
        self.client.get_connector.return_value = {"host": "old", "port": 22}
        params = UpdateConnectorInput(connector_id="SFTP1", properties={"bogus": "y"})
        text = await connector_tools.update_connector(self.client, params)
        self.assertIn("No Valid Properties to Update", text)
        self.assertIn("host, port", text)
        self.assertIn("None of the provided properties match", text)
        self.client.update_connector.assert_not_awaited()

    async def test_update_connector_known_property_with_bad_value(self):
        self.client.get_connector.return_value = {"host": "old", "receiveinterval": "0 * * * *"}
        params = UpdateConnectorInput(connector_id="SFTP1", properties={"ReceiveInterval": "bad"})
        text = await connector_tools.update_connector(self.client, params)
        self.assertIn("No Valid Properties to Update", text)
        self.assertIn("passed validation", text)
        self.assertNotIn("None of the provided properties match", text)
        self.assertIn("cron", text)
        self.client.update_connector.assert_not_awaited()

    async def test_copy_connector(self):
        self.client.copy_connector.return_value = {"value": [{"AllowedPrivileges": "Read,Write"}]}
        params = CopyConnectorInput(workspace_id="WS", connector_id="A", new_connector_id="B")
        text = await connector_tools.copy_connector(self.client, params)
        self.client.copy_connector.assert_awaited_once_with(
            {"WorkspaceId": "WS", "ConnectorId": "A", "NewConnectorId": "B", "NewWorkspaceId": None})
        self.assertIn("Read,Write", text)

    async def test_receive_file_excludes_blank_rows(self):
        self.client.receive_file.return_value = {"value": [{"File": ""}, {"File": "a.txt", "ErrorMessage": "boom"}]}
        text = await connector_tools.receive_file(self.client, ReceiveFileInput(connector_id="SFTP1"))
        self.assertIn("**Succeeded:** 0 | **Failed:** 1", text)
        self.assertIn("a.txt", text)
        self.assertIn("boom", text)

    async def test_receive_file_nothing_available(self):
        self.client.receive_file.return_value = {"value": [{"File": " "}]}
        text = await connector_tools.receive_file(self.client, ReceiveFileInput(connector_id="SFTP1"))
        self.assertIn("no files were available", text)

    async def test_send_file_structured_error(self):
        self.client.send_file.side_effect = ArcAPIError("Port not found", status_code=400, code="SendFile")
        with self.assertRaises(ToolError) as ctx:
            await connector_tools.send_file(self.client, SendFileInput(connector_id="AS2_Out"))
        self.assertIn("Send Operation Failed", str(ctx.exception))
        self.assertIn("SendFile", str(ctx.exception))

    async def test_send_file_success(self):
        self.client.send_file.return_value = [{"File": "po.edi", "MessageId": "m1"}]
        text = await connector_tools.send_file(self.client, SendFileInput(connector_id="AS2_Out", file="po.edi"))
        self.assertIn("Successfully Sent (1)", text)
        self.assertEqual(self.client.send_file.call_args.args[0]["File"], "po.edi")

    async def test_set_flow_body(self):
        params = SetFlowInput(workspace_id="WS", flows=[
            {"connector_id": "A", "connections": ["B", {"dest": "C", "output": "Success"}]}])
        text = await connector_tools.set_flow(self.client, params)
        self.client.set_flow.assert_awaited_once_with({
            "WorkspaceId": "WS",
            "Value": [{"ConnectorId": "A", "Connections": ["B", {"dest": "C", "output": "Success"}]}]
        })
        self.assertIn("C (Success)", text)


if __name__ == "__main__":
    unittest.main()
