from __future__ import annotations

import logging
from typing import Optional, Sequence
from urllib.parse import quote

import httpx

from alphasignal.errors import AllRelaysExhausted

log = logging.getLogger("relay")


class ProxyRelay:
    """
    Reaches a provider through an ordered list of intermediary relays.

    A relay template is a URL with one of two placeholders:
      {url}     the target URL as-is
      {quoted}  the target URL percent-encoded (for ?url= style relays)

    Each attempt gets its own timeout. A timeout, transport error or
    non-2xx status moves straight to the next relay; a relay is never
    retried and relays are never raced against each other.
    """

    def __init__(
        self,
        templates: Sequence[str],
        timeout_s: float = 5.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.templates = list(templates)
        self.timeout_s = timeout_s
        self._client = client or httpx.Client(follow_redirects=True)

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def build_url(template: str, target_url: str) -> str:
        return template.format(url=target_url, quoted=quote(target_url, safe=""))

    def deliver(self, target_url: str) -> httpx.Response:
        """
        Returns the first successful response.
        Raises AllRelaysExhausted if every relay failed.
        """
        for template in self.templates:
            relay_url = self.build_url(template, target_url)
            try:
                resp = self._client.get(relay_url, timeout=self.timeout_s)
            except httpx.TimeoutException:
                log.info("relay timeout relay=%s timeout_s=%s", template, self.timeout_s)
                continue
            except httpx.HTTPError as e:
                log.info("relay transport error relay=%s error=%r", template, e)
                continue

            if resp.is_success:
                return resp

            log.info("relay non-success relay=%s status=%s", template, resp.status_code)

        raise AllRelaysExhausted(target_url, len(self.templates))
