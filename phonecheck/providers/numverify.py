"""
phonecheck/providers/numverify.py
NumVerify backend — number validation over HTTP (apilayer).

NumVerify carries no spam information. A valid answer counts as a
responding source (raises aggregate confidence) with reported=False and
carrier / line type metadata for display. An invalid number, an API
error payload, or any transport failure raises ProviderUnavailable.

API KEY:
  Free key: https://numverify.com/  (100 requests / month)
  Set numverify_key in phonecheck_config.json or NUMVERIFY_KEY in the env.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from phonecheck.errors import ProviderUnavailable
from phonecheck.models.record import ProviderResult
from phonecheck.providers.base import ReputationProvider

logger = logging.getLogger(__name__)

DEFAULT_URL = 'http://apilayer.net/api/validate'


class NumVerifyProvider(ReputationProvider):

    name        = 'numverify'
    free        = True
    daily_limit = 100

    def __init__(
        self,
        api_key:     str                          = 'demo',
        base_url:    str                          = DEFAULT_URL,
        timeout_sec: float                        = 10.0,
        client:      Optional[httpx.AsyncClient]  = None,
    ):
        self.api_key     = api_key
        self.base_url    = base_url
        self.timeout_sec = timeout_sec
        self._client     = client

    async def query(self, number: str) -> ProviderResult:
        params = {
            'access_key':   self.api_key,
            'number':       number,
            'country_code': 'FR',
            'format':       1,
        }
        try:
            data = await self._get(params)
        except httpx.HTTPError as e:
            raise ProviderUnavailable(self.name, f"request failed: {e}") from e
        except ValueError as e:
            raise ProviderUnavailable(self.name, f"invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ProviderUnavailable(self.name, 'unexpected payload')
        if data.get('error'):
            info = data['error'].get('info') if isinstance(data['error'], dict) else data['error']
            raise ProviderUnavailable(self.name, f"API error: {info}")
        if not data.get('valid'):
            raise ProviderUnavailable(self.name, 'number rejected as invalid')

        return ProviderResult(
            provider = self.name,
            reported = False,
            metadata = {
                'country':              data.get('country_name') or '',
                'carrier':              data.get('carrier') or '',
                'line_type':            data.get('line_type') or '',
                'local_format':         data.get('local_format') or '',
                'international_format': data.get('international_format') or '',
            },
        )

    async def _get(self, params: Dict[str, Any]) -> Any:
        if self._client is not None:
            resp = await self._client.get(self.base_url, params=params, timeout=self.timeout_sec)
            resp.raise_for_status()
            return resp.json()
        async with httpx.AsyncClient(timeout=self.timeout_sec) as client:
            resp = await client.get(self.base_url, params=params)
            resp.raise_for_status()
            return resp.json()
