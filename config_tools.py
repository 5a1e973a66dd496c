"""
Profile tools. The profile is the application wide configuration singleton.
"""
from typing import Dict, Any, List
from arc_utils import ArcAPIClient, ArcRecord, PROFILE_FIELDS, format_bytes, yes_no
from arc_models import UpdateProfileInput


# AS2 keys that look like certificates but AS2 configures key paths
_AS2_CERTIFICATE_MISTAKES = {
    "as2:signingcert": "as2:signingkeypath",
    "as2:encryptioncert": "as2:publickeypath",
    "as2:signingcertificate": "as2:signingkeypath",
    "as2:encryptioncertificate": "as2:publickeypath",
    "as2:rolloversigningcertificate": "as2:rolloversigningkeypath",
}


async def get_profile(client: ArcAPIClient) -> str:
    profiles = await client.get_profile()
    if not profiles:
        return "No profile configuration found."
    profile = ArcRecord(profiles[0], PROFILE_FIELDS)
    max_log_size = format_bytes(profile["MaxLogSize"]) if profile.has("MaxLogSize") else "Not set"

    text = ("**Arc Application Profile**\n\n"
            "**Logging Configuration:**\n"
            f"  • Log Level: {profile.get('LogLevel', 'Not set')}\n"
            f"  • Max Log Size: {max_log_size}\n"
            f"  • Log Retention Days: {profile.get('LogRetentionDays', 'Not set')}\n"
            f"  • Notify Start/Stop: {yes_no(profile['NotifyStopStart'])}\n\n"
            "**Single Sign-On (SSO):**\n"
            f"  • SSO Enabled: {yes_no(profile['SSOEnabled'])}\n"
            f"  • JIT Provisioning: {yes_no(profile['SSOEnableJITProvisioning'])}\n\n"
            "**Syslog Configuration:**\n"
            f"  • Syslog Enabled: {yes_no(profile['SyslogEnable'])}\n"
            f"  • Syslog SSL Enabled: {yes_no(profile['SysLogSSLEnabled'])}\n"
            f"  • Enabled Logs: {profile.get('SysLogEnabledLogs', 'Not set')}\n\n"
            "**Other Settings:**\n")
    others = profile.extra()
    text += "\n".join(f"  • {key}: {value}" for key, value in sorted(others.items())) or "  (none)"
    return text


def profile_warnings(changes: Dict[str, Any]) -> List[str]:
    warnings = []
    for key in changes:
        suggestion = _AS2_CERTIFICATE_MISTAKES.get(key.lower())
        if suggestion:
            warnings.append(f"Property \"{key}\" may be incorrect for AS2. AS2 uses 'keypath' properties "
                            f"instead. Did you mean \"{suggestion}\"?")
    return warnings


async def update_profile(client: ArcAPIClient, params: UpdateProfileInput) -> str:
    warnings = profile_warnings(params.properties)
    await client.update_profile(params.properties)
    text = "**Profile Updated Successfully**\n\n"
    if warnings:
        text += "**Warnings:**\n" + "\n".join(warnings) + "\n\n"
    text += "Updated settings:\n" + "\n".join(f"  • {key}: {value}" for key, value in params.properties.items())
    return text
