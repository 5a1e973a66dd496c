# tests/test_vault_tools.py
import unittest
from unittest.mock import AsyncMock

import vault_tools
from arc_models import ODataQueryInput, VaultIdInput, CreateVaultEntryInput, UpdateVaultEntryInput, SearchVaultInput, \
    CountInput
from arc_utils import ArcAPIClient

ENTRIES = [
    {"Id": "v1", "Name": "Secret", "Value": "one", "Type": "Password"},
    {"Id": "v2", "Name": "secret", "Value": "two", "Type": "Password"},
    {"Id": "v3", "Name": "SftpPassword", "Value": "p@ss", "Type": "Password", "Tags": "sftp"},
]


class TestVaultTools(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.client = AsyncMock(spec=ArcAPIClient)
        self.client.datetime_style = "quoted"
        self.client.list_vault_entries.return_value = ENTRIES

    async def test_update_with_ambiguous_name_does_not_mutate(self):
        params = UpdateVaultEntryInput(vault_id="secret", value="new")
        text = await vault_tools.update_vault_entry(self.client, params)
        self.assertIn("Multiple vault entries found", text)
        self.assertIn("v1", text)
        self.assertIn("v2", text)
        self.client.update_vault_entry.assert_not_awaited()

    async def test_delete_with_ambiguous_name_does_not_mutate(self):
        text = await vault_tools.delete_vault_entry(self.client, VaultIdInput(vault_id="SECRET"))
        self.assertIn("Multiple vault entries found", text)
        self.client.delete_vault_entry.assert_not_awaited()

    async def test_update_resolves_name_to_id(self):
        self.client.update_vault_entry.return_value = {}
        params = UpdateVaultEntryInput(vault_id="sftppassword", value="changed", tags="sftp,prod")
        text = await vault_tools.update_vault_entry(self.client, params)
        self.client.update_vault_entry.assert_awaited_once_with("v3", {"Value": "changed", "Tags": "sftp,prod"})
        self.assertIn("Vault Entry Updated", text)
        self.assertNotIn("changed", text)

    async def test_create_sends_secret_untrimmed(self):
        self.client.create_vault_entry.return_value = {}
        params = CreateVaultEntryInput(id=" v4 ", name="ApiKey", value="  s3cret \n", type="Password")
        text = await vault_tools.create_vault_entry(self.client, params)
        self.client.create_vault_entry.assert_awaited_once_with({"Id": "v4", "Name": "ApiKey",
                                                                 "Value": "  s3cret \n", "Type": "Password"})
        self.assertIn("Vault Entry Created", text)
        self.assertNotIn("s3cret", text)

    async def test_update_sends_whitespace_value_as_given(self):
        self.client.update_vault_entry.return_value = {}
        params = UpdateVaultEntryInput(vault_id=" SftpPassword ", value="   ")
        await vault_tools.update_vault_entry(self.client, params)
        self.client.update_vault_entry.assert_awaited_once_with("v3", {"Value": "   "})

    async def test_update_without_fields(self):
        text = await vault_tools.update_vault_entry(self.client, UpdateVaultEntryInput(vault_id="SftpPassword"))
        self.assertIn("No update fields provided", text)
        self.client.list_vault_entries.assert_not_awaited()

    async def test_get_not_found_suggests_names(self):
        text = await vault_tools.get_vault_entry(self.client, VaultIdInput(vault_id="SftpPasword"))
        self.assertIn("Vault entry with name 'SftpPasword' not found.", text)
        self.assertIn("'SftpPassword'", text)

    async def test_get_shows_value(self):
        text = await vault_tools.get_vault_entry(self.client, VaultIdInput(vault_id="sftppassword"))
        self.assertIn("**Value:** p@ss", text)
        self.client.list_vault_entries.assert_awaited_once_with()

    async def test_list_masks_values(self):
        text = await vault_tools.list_vault_entries(self.client, ODataQueryInput())
        self.assertIn("Found 3 vault entries", text)
        self.assertNotIn("p@ss", text)
        self.assertEqual(self.client.list_vault_entries.call_args.args[0]["orderby"], "Name ASC")

    async def test_list_empty(self):
        self.client.list_vault_entries.return_value = []
        text = await vault_tools.list_vault_entries(self.client, ODataQueryInput())
        self.assertEqual(text, "No vault entries found matching the criteria.")

    async def test_search_by_type_filter(self):
        await vault_tools.search_vault_by_type(self.client, SearchVaultInput(type="Password", tags="sftp"))
        query = self.client.list_vault_entries.call_args.args[0]
        self.assertEqual(query["filter"], "Type eq 'Password' and contains(Tags, 'sftp')")

    async def test_count(self):
        self.client.count_vault_entries.return_value = 3
        text = await vault_tools.get_vault_count(self.client, CountInput())
        self.assertIn("**3**", text)


if __name__ == "__main__":
    unittest.main()
