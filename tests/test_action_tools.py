# tests/test_action_tools.py
import unittest
from unittest.mock import AsyncMock

from pydantic import ValidationError

import action_tools
from arc_models import CleanupInput, ExportInput, ImportInput
from arc_utils import ArcAPIClient


class TestCleanup(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.client = AsyncMock(spec=ArcAPIClient)

    async def test_cleanup_scope_and_mode(self):
        self.client.cleanup.return_value = {"success": True, "FilesRemoved": 4}
        params = CleanupInput(type="Delete", age=30, connector_id="AS2_Out")
        text = await action_tools.cleanup_files(self.client, params)
        self.client.cleanup.assert_awaited_once_with({"Type": "Delete", "Age": 30, "WorkspaceId": None,
                                                      "ConnectorId": "AS2_Out"})
        self.assertTrue(text.startswith("Cleanup operation completed for all workspaces, connector: AS2_Out "
                                        "(Delete mode) for files older than 30 days"))
        self.assertIn("FilesRemoved: 4", text)
        self.assertNotIn("success", text)

    async def test_cleanup_defaults(self):
        self.client.cleanup.return_value = None
        text = await action_tools.cleanup_files(self.client, CleanupInput())
        self.assertEqual(text, "Cleanup operation completed for all workspaces, all connectors "
                               "(using default settings)")

    def test_cleanup_rejects_unknown_type(self):
        with self.assertRaises(ValidationError):
            CleanupInput(type="Shred")


class TestExportImport(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.client = AsyncMock(spec=ArcAPIClient)

    async def test_export_returns_full_archive(self):
        data = "UEsDB" * 100
        self.client.export_configuration.return_value = {"value": [{"Data": data}]}
        text = await action_tools.export_configuration(self.client, ExportInput(workspace_id="Default"))
        self.assertIn("Exported workspace 'Default'.", text)
        self.assertIn(f"**Archive Size:** {len(data)} characters", text)
        self.assertIn(data, text)
        self.assertNotIn("Response Details", text)

    async def test_export_reads_lowercase_data(self):
        self.client.export_configuration.return_value = {"value": [{"data": "UEsDB"}]}
        text = await action_tools.export_configuration(self.client, ExportInput(connector_id="AS2_Out"))
        self.assertIn("Exported connector 'AS2_Out'.", text)
        self.assertIn("**Archive Size:** 5 characters", text)

    async def test_export_without_data(self):
        self.client.export_configuration.return_value = {}
        text = await action_tools.export_configuration(self.client, ExportInput())
        self.assertIn("the whole application", text)
        self.assertIn("The server returned no archive data.", text)

    async def test_import_sends_overwrite_as_string(self):
        self.client.import_configuration.return_value = {"success": True}
        text = await action_tools.import_configuration(self.client, ImportInput(data="UEsDB", overwrite=True))
        self.client.import_configuration.assert_awaited_once_with({"Data": "UEsDB", "Password": None,
                                                                   "Overwrite": "true"})
        self.assertIn("Existing items were overwritten.", text)


if __name__ == "__main__":
    unittest.main()
