# tests/test_arc_client.py
import json
import unittest
from unittest.mock import MagicMock

import requests
from requests.auth import HTTPBasicAuth

from arc_utils import ArcAPIClient, ArcAPIError

BASE_URL = "http://arc.local:8181/api.rsc"


def make_response(status=200, json_body=None, text="", reason="OK"):
    response = MagicMock()
    response.ok = status < 400
    response.status_code = status
    response.reason = reason
    if json_body is None:
        response.content = text.encode()
        response.text = text
        response.json.side_effect = ValueError("no json")
    else:
        response.content = json.dumps(json_body).encode()
        response.text = json.dumps(json_body)
        response.json.return_value = json_body
    return response


class TestClientConfiguration(unittest.TestCase):
    def test_trailing_slash_is_stripped(self):
        self.assertEqual(ArcAPIClient(BASE_URL + "/").base_url, BASE_URL)

    def test_default_base_url(self):
        self.assertEqual(ArcAPIClient().base_url, "http://localhost:8181/api.rsc")

    def test_token_with_colon_uses_basic_auth(self):
        client = ArcAPIClient(BASE_URL, "admin:secret:part")
        self.assertIsInstance(client._session.auth, HTTPBasicAuth)
        self.assertEqual(client._session.auth.username, "admin")
        self.assertEqual(client._session.auth.password, "secret:part")
        self.assertNotIn("x-cdata-authtoken", client._session.headers)

    def test_plain_token_uses_header(self):
        client = ArcAPIClient(BASE_URL, "abc123")
        self.assertEqual(client._session.headers["x-cdata-authtoken"], "abc123")
        self.assertEqual(client._session.headers["Accept"], "application/json")
        self.assertTrue(client.auth_configured)

    def test_no_token(self):
        self.assertFalse(ArcAPIClient(BASE_URL).auth_configured)

    def test_unknown_datetime_style(self):
        with self.assertRaises(ValueError):
            ArcAPIClient(BASE_URL, datetime_style="epoch")


class TestClientRequests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.client = ArcAPIClient(BASE_URL, "token")
        self.session = MagicMock()
        self.client._session = self.session

    def last_call(self):
        args, kwargs = self.session.request.call_args
        return args[0], args[1], kwargs

    async def test_list_builds_odata_url(self):
        self.session.request.return_value = make_response(json_body={"value": [{"ConnectorId": "A"}]})
        result = await self.client.list_connectors({"filter": "ConnectorType eq 'AS2'", "top": 5})
        self.assertEqual(result, [{"ConnectorId": "A"}])
        method, url, kwargs = self.last_call()
        self.assertEqual(method, "GET")
        self.assertEqual(url, BASE_URL + "/connectors?$filter=ConnectorType%20eq%20%27AS2%27&$top=5")
        self.assertEqual(kwargs["timeout"], 30)

    async def test_list_without_value_is_empty(self):
        self.session.request.return_value = make_response(json_body={})
        self.assertEqual(await self.client.list_reports(), [])

    async def test_get_404_returns_none(self):
        self.session.request.return_value = make_response(404, reason="Not Found")
        self.assertIsNone(await self.client.get_connector("missing"))
        self.assertEqual(self.last_call()[1], BASE_URL + "/connectors('missing')")

    async def test_get_500_raises(self):
        self.session.request.return_value = make_response(500, reason="Internal Server Error")
        with self.assertRaises(ArcAPIError) as ctx:
            await self.client.get_workspace("Default")
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertFalse(ctx.exception.is_structured)
        self.assertEqual(ctx.exception.message, "HTTP 500: Internal Server Error")

    async def test_structured_error_is_parsed(self):
        body = {"error": {"code": "CreateConnector", "message": "Connector AS2 already exists."}}
        self.session.request.return_value = make_response(400, json_body=body, reason="Bad Request")
        with self.assertRaises(ArcAPIError) as ctx:
            await self.client.create_connector({"connectorid": "AS2"})
        self.assertTrue(ctx.exception.is_structured)
        self.assertEqual(ctx.exception.code, "CreateConnector")
        self.assertEqual(ctx.exception.message, "Connector AS2 already exists.")

    async def test_transport_failure_raises_api_error(self):
        self.session.request.side_effect = requests.exceptions.ConnectionError("refused")
        with self.assertRaises(ArcAPIError) as ctx:
            await self.client.list_logs()
        self.assertIsNone(ctx.exception.status_code)

    async def test_file_composite_key(self):
        self.session.request.return_value = make_response(json_body={"Filename": "a.edi"})
        await self.client.get_file("AS2", "Send", "a.edi", "m-1")
        self.assertEqual(self.last_call()[1], BASE_URL + "/files(ConnectorId='AS2',Folder='Send',"
                                                         "Filename='a.edi',MessageId='m-1')")

    async def test_count_reads_plain_text(self):
        self.session.request.return_value = make_response(text="42")
        self.assertEqual(await self.client.count_transactions({"filter": "Status eq 'Error'"}), 42)
        method, url, kwargs = self.last_call()
        self.assertEqual(url, BASE_URL + "/transactions/$count?$filter=Status%20eq%20%27Error%27")
        self.assertEqual(kwargs["headers"], {"Accept": "text/plain; charset=utf-8"})

    async def test_count_empty_body_is_zero(self):
        self.session.request.return_value = make_response(text="")
        self.assertEqual(await self.client.count_requests(), 0)

    async def test_property_value(self):
        self.session.request.return_value = make_response(text="Error")
        self.assertEqual(await self.client.get_transaction_property("t1", "Status"), "Error")
        self.assertEqual(self.last_call()[1], BASE_URL + "/transactions('t1')/Status/$value")

    async def test_property_404_returns_none(self):
        self.session.request.return_value = make_response(404, reason="Not Found")
        self.assertIsNone(await self.client.get_workspace_property("w", "nope"))

    async def test_profile_is_wrapped_in_list(self):
        self.session.request.return_value = make_response(json_body={"LogLevel": "Info"})
        self.assertEqual(await self.client.get_profile(), [{"LogLevel": "Info"}])

    async def test_update_profile_sends_odata_type(self):
        self.session.request.return_value = make_response(json_body={})
        await self.client.update_profile({"LogLevel": "Debug"})
        method, url, kwargs = self.last_call()
        self.assertEqual(method, "PUT")
        self.assertEqual(url, BASE_URL + "/profile")
        self.assertEqual(kwargs["json"], {"@odata.type": "CDataAPI.Profile", "LogLevel": "Debug"})

    async def test_action_drops_empty_parameters(self):
        self.session.request.return_value = make_response(json_body={"value": []})
        await self.client.receive_file({"ConnectorId": "SFTP", "WorkspaceId": None, "File": ""})
        method, url, kwargs = self.last_call()
        self.assertEqual(method, "POST")
        self.assertEqual(url, BASE_URL + "/receiveFile")
        self.assertEqual(kwargs["json"], {"ConnectorId": "SFTP"})

    async def test_delete_with_empty_body(self):
        self.session.request.return_value = make_response(text="")
        await self.client.delete_vault_entry("v1")
        method, url, _ = self.last_call()
        self.assertEqual((method, url), ("DELETE", BASE_URL + "/vault('v1')"))


if __name__ == "__main__":
    unittest.main()
