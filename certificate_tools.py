"""
Certificate tools, including the createCert and exchangeCert actions.
"""
from typing import Dict, Any
from arc_utils import ArcAPIClient, ArcRecord, CERTIFICATE_FIELDS, ACTION_RESULT_FIELDS
from arc_utils import as_records, format_date, is_true
from arc_models import (ODataQueryInput, CertificateNameInput, CreateCertificateInput, CreateCertInput,
                        ExchangeCertInput)


def _expiration(c: ArcRecord) -> str:
    text = c.get("ExpirationDate", "N/A")
    if c.has("ExpirationDays"):
        text += f" ({c['ExpirationDays']} days)"
    return text


async def list_certificates(client: ArcAPIClient, params: ODataQueryInput) -> str:
    certificates = await client.list_certificates(params.query())
    if not certificates:
        return "No certificates found matching the criteria."
    blocks = []
    for raw in certificates:
        c = ArcRecord(raw, CERTIFICATE_FIELDS)
        block = (f"• **{c.get('Name', 'Unknown')}**\n"
                 f"  Subject: {c.get('Subject', 'N/A')}\n"
                 f"  Issuer: {c.get('IssuedBy', c.get('Issuer', 'N/A'))}\n"
                 f"  Expires: {_expiration(c)}\n"
                 f"  Thumbprint: {c.get('Thumbprint', 'N/A')}\n")
        if c.has("ConnectorIds"):
            block += f"  Used by: {c['ConnectorIds']}\n"
        blocks.append(block)
    return f"**Found {len(certificates)} certificates:**\n\n" + "\n".join(blocks)


async def get_certificate(client: ArcAPIClient, params: CertificateNameInput) -> str:
    certificate = await client.get_certificate(params.name)
    if certificate is None:
        return f"Certificate '{params.name}' not found."
    c = ArcRecord(certificate, CERTIFICATE_FIELDS)
    text = (f"**Certificate Details**\n\n"
            f"**Name:** {c.get('Name', params.name)}\n"
            f"**Store Type:** {c.get('StoreType', 'N/A')}\n"
            f"**Subject:** {c.get('Subject', 'N/A')}\n"
            f"**Issued To:** {c.get('IssuedTo', 'N/A')}\n"
            f"**Issuer:** {c.get('Issuer', 'N/A')}\n"
            f"**Issued By:** {c.get('IssuedBy', 'N/A')}\n"
            f"**Effective Date:** {c.get('EffectiveDate', 'N/A')}\n"
            f"**Expiration Date:** {c.get('ExpirationDate', 'N/A')}\n")
    if c.has("ExpirationDays"):
        text += f"**Days Until Expiration:** {c['ExpirationDays']}\n"
    text += (f"**Serial Number:** {c.get('SerialNumber', 'N/A')}\n"
             f"**Thumbprint:** {c.get('Thumbprint', 'N/A')}\n"
             f"**Key Size:** {c.get('KeySize', 'N/A')}\n"
             f"**Signature Algorithm:** {c.get('SignatureAlgorithm', 'N/A')}\n")
    if c.has("ConnectorIds"):
        text += f"**Used by Connectors:** {c['ConnectorIds']}\n"
    return text


async def create_certificate(client: ArcAPIClient, params: CreateCertificateInput) -> str:
    body: Dict[str, Any] = {"Name": params.name}
    if params.data:
        body["Data"] = params.data
    if params.store_type:
        body["StoreType"] = params.store_type
    if params.connector_ids:
        body["ConnectorIds"] = params.connector_ids
    c = ArcRecord({**body, **(await client.create_certificate(body) or {})}, CERTIFICATE_FIELDS)
    return (f"**Certificate Created**\n\n"
            f"**Name:** {c.get('Name', params.name)}\n"
            f"**Subject:** {c.get('Subject', 'N/A')}\n"
            f"**Store Type:** {c.get('StoreType', 'N/A')}\n"
            f"**Expiration:** {_expiration(c)}")


async def delete_certificate(client: ArcAPIClient, params: CertificateNameInput) -> str:
    await client.delete_certificate(params.name)
    return f"**Certificate Deleted**\n\nCertificate '{params.name}' has been permanently deleted."


async def create_cert(client: ArcAPIClient, params: CreateCertInput) -> str:
    records = as_records(await client.create_cert({
        "Filename": params.filename,
        "CommonName": params.common_name,
        "Serialnumber": params.serial_number,
        "Password": params.password,
        "Organization": params.organization,
        "OrganizationalUnit": params.organizational_unit,
        "Locality": params.locality,
        "State": params.state,
        "Country": params.country,
        "Email": params.email,
        "Expiration": params.expiration,
        "KeySize": params.key_size,
        "SignatureAlgorithm": params.signature_algorithm
    }))
    text = (f"**Certificate Key Pair Created**\n\n"
            f"**Filename:** {params.filename}\n"
            f"**Common Name:** {params.common_name}\n"
            f"**Serial Number:** {params.serial_number}")
    if records and records[0].get("Name"):
        text += f"\n**Created File:** {records[0]['Name']}"
    if records and records[0].get("Password"):
        text += f"\n**Password:** {records[0]['Password']}"
    if params.expiration:
        text += f"\n**Expiration:** {params.expiration} years"
    if params.key_size:
        text += f"\n**Key Size:** {params.key_size}"
    if params.signature_algorithm:
        text += f"\n**Signature Algorithm:** {params.signature_algorithm}"
    return text


async def exchange_cert(client: ArcAPIClient, params: ExchangeCertInput) -> str:
    records = as_records(await client.exchange_cert({
        "WorkspaceId": params.workspace_id,
        "ConnectorId": params.connector_id,
        "PortId": params.port_id,
        "Certificate": params.certificate,
        "ExchangeType": params.exchange_type,
        "CertificatePassword": params.certificate_password,
        "CertificateUsage": params.certificate_usage,
        "ResponseURL": params.response_url,
        "RequestId": params.request_id
    }))
    text = (f"**Certificate Exchange Initiated**\n\n"
            f"**Certificate:** {params.certificate}\n"
            f"**Exchange Type:** {params.exchange_type}")
    for label, value in (("Workspace", params.workspace_id), ("Connector", params.connector_id),
                         ("Port", params.port_id), ("Usage", params.certificate_usage),
                         ("Response URL", params.response_url), ("Request ID", params.request_id)):
        if value:
            text += f"\n**{label}:** {value}"
    for raw in records:
        r = ArcRecord(raw, ACTION_RESULT_FIELDS)
        if r.has("Message"):
            text += f"\n\n**Result:** {r['Message']}"
        if r.has("Success"):
            text += f"\n**Status:** {'Success' if is_true(r['Success']) else 'Failed'}"
        if r.has("TimeCreated"):
            text += f"\n**Created:** {format_date(r['TimeCreated'])}"
    return text
