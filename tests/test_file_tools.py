# tests/test_file_tools.py
import datetime
import unittest
from unittest.mock import AsyncMock, patch

from pydantic import ValidationError

import file_tools
from arc_models import (ODataQueryInput, FileKeyInput, CreateFileInput, UpdateFileInput, FilesByConnectorInput,
                        RecentFilesInput)
from arc_utils import ArcAPIClient

NOW = datetime.datetime(2024, 3, 10, 12, 0, 0, tzinfo=datetime.timezone.utc)
KEY = {"connector_id": "AS2_Out", "folder": "Send", "filename": "po.edi", "message_id": "m1"}


class TestFileTools(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.client = AsyncMock(spec=ArcAPIClient)
        self.client.datetime_style = "quoted"

    async def test_list_empty(self):
        self.client.list_files.return_value = []
        text = await file_tools.list_files(self.client, ODataQueryInput())
        self.assertEqual(text, "No files found matching the criteria.")

    async def test_get_file_not_found(self):
        self.client.get_file.return_value = None
        text = await file_tools.get_file(self.client, FileKeyInput(**KEY))
        self.assertEqual(text, "File not found: po.edi in Send for connector AS2_Out")
        self.client.get_file.assert_awaited_once_with("AS2_Out", "Send", "po.edi", "m1")

    async def test_create_file_body(self):
        self.client.create_file.return_value = {"FileSize": 2048}
        text = await file_tools.create_file(self.client, CreateFileInput(content="aGVsbG8=", **KEY))
        self.client.create_file.assert_awaited_once_with({"ConnectorId": "AS2_Out", "Folder": "Send",
                                                          "Filename": "po.edi", "MessageId": "m1",
                                                          "Content": "aGVsbG8="})
        self.assertIn("**Size:** 2 KB", text)

    async def test_update_file_requires_a_change(self):
        with self.assertRaises(ValidationError):
            UpdateFileInput(**KEY)

    async def test_update_file_sends_changes(self):
        self.client.update_file.return_value = {}
        await file_tools.update_file(self.client, UpdateFileInput(subfolder="archive", **KEY))
        self.client.update_file.assert_awaited_once_with("AS2_Out", "Send", "po.edi", "m1",
                                                         {"Subfolder": "archive"})

    async def test_files_by_connector_total_size(self):
        self.client.list_files.return_value = [{"Filename": "a", "FileSize": 1024},
                                               {"Filename": "b", "FileSize": 512}]
        text = await file_tools.get_files_by_connector(self.client, FilesByConnectorInput(connector_id="AS2_Out",
                                                                                          folder="Send"))
        self.assertIn("**Total Size:** 1.5 KB", text)
        query = self.client.list_files.call_args.args[0]
        self.assertEqual(query["filter"], "ConnectorId eq 'AS2_Out' and Folder eq 'Send'")
        self.assertEqual(query["orderby"], "TimeCreated DESC")

    @patch("file_tools.utc_now", return_value=NOW)
    async def test_recent_files_groups_by_connector(self, _now):
        self.client.list_files.return_value = [{"ConnectorId": "A", "Filename": f"f{i}.txt"} for i in range(7)]
        text = await file_tools.get_recent_files(self.client, RecentFilesInput(hours=12))
        self.assertEqual(self.client.list_files.call_args.args[0]["filter"],
                         "TimeCreated ge '2024-03-10T00:00:00.000Z'")
        self.assertIn("**A** (7 files)", text)
        self.assertIn("... and 2 more", text)
        self.assertNotIn("f5.txt", text)

    @patch("file_tools.utc_now", return_value=NOW)
    async def test_recent_files_empty(self, _now):
        self.client.list_files.return_value = []
        text = await file_tools.get_recent_files(self.client, RecentFilesInput())
        self.assertEqual(text, "No files found in the last 24 hours.")


if __name__ == "__main__":
    unittest.main()
