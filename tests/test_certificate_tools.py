# tests/test_certificate_tools.py
import unittest
from unittest.mock import AsyncMock

import certificate_tools
from arc_models import ODataQueryInput, CertificateNameInput, CreateCertificateInput, CreateCertInput, \
    ExchangeCertInput
from arc_utils import ArcAPIClient


class TestCertificateTools(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.client = AsyncMock(spec=ArcAPIClient)

    async def test_list(self):
        self.client.list_certificates.return_value = [
            {"Name": "partner.cer", "Subject": "CN=Partner", "ExpirationDate": "2025-01-01", "ExpirationDays": 90,
             "ConnectorIds": "AS2_Out"}
        ]
        text = await certificate_tools.list_certificates(self.client, ODataQueryInput())
        self.assertIn("**Found 1 certificates:**", text)
        self.assertIn("Expires: 2025-01-01 (90 days)", text)
        self.assertIn("Used by: AS2_Out", text)

    async def test_list_empty(self):
        self.client.list_certificates.return_value = []
        text = await certificate_tools.list_certificates(self.client, ODataQueryInput(filter="Name eq 'x'"))
        self.assertEqual(text, "No certificates found matching the criteria.")

    async def test_get_not_found(self):
        self.client.get_certificate.return_value = None
        text = await certificate_tools.get_certificate(self.client, CertificateNameInput(name="nope.cer"))
        self.assertEqual(text, "Certificate 'nope.cer' not found.")

    async def test_get_reads_lowercase_serial(self):
        self.client.get_certificate.return_value = {"Name": "me.pfx", "Serialnumber": "01AB", "Keysize": 2048}
        text = await certificate_tools.get_certificate(self.client, CertificateNameInput(name="me.pfx"))
        self.assertIn("**Serial Number:** 01AB", text)
        self.assertIn("**Key Size:** 2048", text)

    async def test_create_body(self):
        self.client.create_certificate.return_value = {}
        params = CreateCertificateInput(name="partner.cer", data="TUlJ", store_type="PEMKEY_FILE")
        text = await certificate_tools.create_certificate(self.client, params)
        self.client.create_certificate.assert_awaited_once_with({"Name": "partner.cer", "Data": "TUlJ",
                                                                 "StoreType": "PEMKEY_FILE"})
        self.assertIn("**Store Type:** PEMKEY_FILE", text)

    async def test_create_cert_reports_generated_file(self):
        self.client.create_cert.return_value = {"value": [{"Name": "me.pfx", "Password": "secret"}]}
        params = CreateCertInput(filename="me", common_name="Me", serial_number="01", password="secret",
                                 expiration=2)
        text = await certificate_tools.create_cert(self.client, params)
        body = self.client.create_cert.call_args.args[0]
        self.assertEqual(body["CommonName"], "Me")
        self.assertEqual(body["Serialnumber"], "01")
        self.assertIn("**Created File:** me.pfx", text)
        self.assertIn("**Expiration:** 2 years", text)

    async def test_exchange_cert(self):
        self.client.exchange_cert.return_value = {"success": False, "message": "Partner unreachable"}
        params = ExchangeCertInput(certificate="me.cer", exchange_type="Request", connector_id="AS2_Out")
        text = await certificate_tools.exchange_cert(self.client, params)
        self.assertIn("**Connector:** AS2_Out", text)
        self.assertIn("**Result:** Partner unreachable", text)
        self.assertIn("**Status:** Failed", text)

    async def test_exchange_cert_capitalized_result(self):
        self.client.exchange_cert.return_value = {"Success": "true", "Message": "Request sent"}
        params = ExchangeCertInput(certificate="me.cer", exchange_type="Request", connector_id="AS2_Out")
        text = await certificate_tools.exchange_cert(self.client, params)
        self.assertIn("**Result:** Request sent", text)
        self.assertIn("**Status:** Success", text)

    async def test_create_cert_keeps_password_as_given(self):
        self.client.create_cert.return_value = {}
        params = CreateCertInput(filename="me", common_name="Me", serial_number="01", password=" pw ")
        await certificate_tools.create_cert(self.client, params)
        self.assertEqual(self.client.create_cert.call_args.args[0]["Password"], " pw ")


if __name__ == "__main__":
    unittest.main()
