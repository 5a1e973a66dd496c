# tests/test_workspace_tools.py
import unittest
from unittest.mock import AsyncMock

from fastmcp.exceptions import ToolError

import config_tools
import workspace_tools
from arc_models import (ODataQueryInput, WorkspaceIdInput, UpdateWorkspaceInput, SearchWorkspacesInput,
                        UpdateProfileInput)
from arc_utils import ArcAPIClient


class TestWorkspaceTools(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.client = AsyncMock(spec=ArcAPIClient)
        self.client.datetime_style = "quoted"

    async def test_list_empty(self):
        self.client.list_workspaces.return_value = []
        text = await workspace_tools.list_workspaces(self.client, ODataQueryInput())
        self.assertIn("No workspaces found", text)

    async def test_list_reads_lowercase_and_capitalized(self):
        self.client.list_workspaces.return_value = [{"workspaceid": "Default", "smtpserver": "mail.local"},
                                                    {"WorkspaceId": "Legacy", "S3Bucket": "arc"}]
        text = await workspace_tools.list_workspaces(self.client, ODataQueryInput())
        self.assertIn("Found 2 workspace(s)", text)
        self.assertIn("SMTP Server: mail.local", text)
        self.assertIn("S3 Bucket: arc", text)

    async def test_get_not_found(self):
        self.client.get_workspace.return_value = None
        text = await workspace_tools.get_workspace(self.client, WorkspaceIdInput(workspace_id="Nope"))
        self.assertEqual(text, "Workspace 'Nope' not found.")

    async def test_get_sections(self):
        self.client.get_workspace.return_value = {"workspaceid": "Default", "s3bucket": "arc",
                                                  "overrideemailsettings": "true"}
        text = await workspace_tools.get_workspace(self.client, WorkspaceIdInput(workspace_id="Default"))
        self.assertIn("**S3 Configuration:**", text)
        self.assertIn("Access Key: [NOT SET]", text)
        self.assertIn("**Override Settings:** Email", text)
        self.assertNotIn("Email Configuration", text)

    async def test_update_without_fields_is_an_error(self):
        with self.assertRaises(ToolError):
            await workspace_tools.update_workspace(self.client, UpdateWorkspaceInput(workspace_id="Default"))
        self.client.update_workspace.assert_not_awaited()

    async def test_search_filter(self):
        self.client.list_workspaces.return_value = []
        text = await workspace_tools.search_workspaces(self.client, SearchWorkspacesInput(search_term="Prod"))
        self.assertEqual(self.client.list_workspaces.call_args.args[0]["filter"],
                         "contains(tolower(workspaceid),'prod') or contains(tolower(workspacetype),'prod')")
        self.assertEqual(text, "No workspaces found matching 'Prod'.")


class TestProfileTools(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.client = AsyncMock(spec=ArcAPIClient)

    async def test_get_profile_sections(self):
        self.client.get_profile.return_value = [{"LogLevel": "Info", "SSOEnabled": "true", "MaxLogSize": 1048576,
                                                 "as2:localsigningcertificate": "me.pfx"}]
        text = await config_tools.get_profile(self.client)
        self.assertIn("Log Level: Info", text)
        self.assertIn("SSO Enabled: Yes", text)
        self.assertIn("Max Log Size: 1.00 MB", text)
        self.assertIn("as2:localsigningcertificate: me.pfx", text)

    async def test_get_profile_empty(self):
        self.client.get_profile.return_value = []
        self.assertEqual(await config_tools.get_profile(self.client), "No profile configuration found.")

    async def test_update_profile_warns_on_as2_certificate_keys(self):
        params = UpdateProfileInput(properties={"as2:signingcertificate": "me.pfx"})
        text = await config_tools.update_profile(self.client, params)
        self.client.update_profile.assert_awaited_once_with({"as2:signingcertificate": "me.pfx"})
        self.assertIn("Profile Updated Successfully", text)
        self.assertIn("as2:signingkeypath", text)


if __name__ == "__main__":
    unittest.main()
