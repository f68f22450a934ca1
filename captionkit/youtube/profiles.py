"""
Client impersonation profiles.

Each profile declares the platform, version and headers of a known YouTube
client. The upstream serves different player data (and different bot
checks) depending on which client it believes is asking, so the fetcher
walks these profiles in order.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..models import ExtractorConfig

INNERTUBE_CLIENT_VERSION = "2.20250222.10.00"

_ANDROID_UA = "com.google.android.youtube/19.09.37 (Linux; U; Android 14) gzip"
_IOS_UA = "com.google.ios.youtube/19.45.4 (iPhone16,2; U; CPU iOS 18_1_0 like Mac OS X)"


@dataclass
class ClientProfile:
    """One client the innertube requests impersonate."""
    name: str
    client_name: str
    client_version: str
    user_agent: Optional[str] = None  # None means the environment's browser UA
    client_fields: Dict[str, Any] = field(default_factory=dict)
    extra_context: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)

    def build_context(self, config: ExtractorConfig) -> Dict[str, Any]:
        """
        Build the innertube ``context`` object for this client.

        Args:
            config: Extractor configuration (language, region, environment)

        Returns:
            Dictionary suitable for the ``context`` key of an innertube request
        """
        client = {
            'hl': config.hl,
            'gl': config.gl,
            'clientName': self.client_name,
            'clientVersion': self.client_version,
            'utcOffsetMinutes': 0,
            'timeZone': 'UTC',
        }
        client.update(self.client_fields)

        context = {
            'client': client,
            'user': {'lockedSafetyMode': False},
            'request': {'useSsl': True, 'internalExperimentFlags': []},
        }
        context.update(self.extra_context)
        return context

    def build_headers(self, config: ExtractorConfig) -> Dict[str, str]:
        """Request headers for a JSON POST made as this client."""
        headers = {
            'Content-Type': 'application/json',
            'Accept': 'application/json, text/plain, */*',
            'Accept-Language': 'en-US,en;q=0.9',
            'Origin': 'https://www.youtube.com',
            'Referer': 'https://www.youtube.com/',
            'User-Agent': self.user_agent or config.user_agent,
        }
        headers.update(self.headers)
        return headers


def web_profile(config: ExtractorConfig) -> ClientProfile:
    """Desktop web client, with OS details matching the runtime environment."""
    return ClientProfile(
        name="WEB",
        client_name="WEB",
        client_version=INNERTUBE_CLIENT_VERSION,
        client_fields={
            'osName': config.os_name,
            'osVersion': config.os_version,
            'platform': 'DESKTOP',
            'clientFormFactor': 'UNKNOWN_FORM_FACTOR',
            'browserName': 'Chrome',
            'browserVersion': '119.0.0.0',
            'originalUrl': 'https://www.youtube.com',
        },
        headers={
            'DNT': '1',
            'Sec-GPC': '1',
            'Sec-Fetch-Dest': 'empty',
            'Sec-Fetch-Mode': 'cors',
            'Sec-Fetch-Site': 'same-origin',
        },
    )


def default_profiles(config: ExtractorConfig) -> List[ClientProfile]:
    """
    Ordered client profiles tried by the innertube player strategy.

    Args:
        config: Extractor configuration

    Returns:
        List of ClientProfile, most preferred first
    """
    return [
        web_profile(config),
        ClientProfile(
            name="WEB_EMBEDDED",
            client_name="WEB_EMBEDDED_PLAYER",
            client_version="1.20250219.01.00",
            extra_context={'thirdParty': {'embedUrl': 'https://www.google.com/'}},
        ),
        ClientProfile(
            name="ANDROID",
            client_name="ANDROID",
            client_version="19.09.37",
            user_agent=_ANDROID_UA,
            client_fields={'androidSdkVersion': 30, 'osName': 'Android', 'osVersion': '14'},
            headers={'X-YouTube-Client-Name': '3', 'X-YouTube-Client-Version': '19.09.37'},
        ),
        ClientProfile(
            name="IOS",
            client_name="IOS",
            client_version="19.45.4",
            user_agent=_IOS_UA,
            client_fields={'deviceModel': 'iPhone16,2', 'osName': 'iPhone', 'osVersion': '18.1.0'},
            headers={'X-YouTube-Client-Name': '5', 'X-YouTube-Client-Version': '19.45.4'},
        ),
    ]
