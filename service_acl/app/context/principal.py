"""
Principal extraction from transport carriers.
"""

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Dict, Optional

from shared.errors import MalformedPrincipalError
from .adapter import read_field, state_of


class PrincipalExtractor(ABC):
    """Reads the authenticated principal off a principal carrier."""

    @abstractmethod
    async def extract(self, carrier: Any) -> Optional[Dict[str, Any]]:
        """Return the principal, or None for an anonymous caller."""


class HeaderPrincipalExtractor(PrincipalExtractor):
    """Principal set by an upstream auth layer, or carried as a JSON header.

    The field wins when both are present. A header that is present but does
    not decode to a JSON object is an error, never an anonymous caller.
    """

    def __init__(self, header: str = "x-auth", field: str = "auth"):
        self.header = header
        self.field = field

    async def extract(self, carrier: Any) -> Optional[Dict[str, Any]]:
        if carrier is None:
            return None

        # Read from .state only: Request.auth requires AuthenticationMiddleware
        principal = read_field(state_of(carrier), self.field)
        if principal is not None:
            return principal

        raw = self._header_value(carrier)
        if raw is None:
            return None
        return self._decode(raw)

    def _header_value(self, carrier: Any) -> Any:
        headers = read_field(carrier, "headers")
        if not isinstance(headers, Mapping):
            return None

        value = headers.get(self.header)
        if value is None:
            wanted = self.header.lower()
            for name, candidate in headers.items():
                if isinstance(name, str) and name.lower() == wanted:
                    return candidate
        return value

    def _decode(self, raw: Any) -> Dict[str, Any]:
        try:
            if isinstance(raw, (bytes, bytearray)):
                raw = raw.decode("utf-8")
            payload = json.loads(raw)
        except (UnicodeDecodeError, ValueError) as e:
            raise MalformedPrincipalError(
                f"Header '{self.header}' is not a valid JSON principal",
                {"header": self.header, "error": str(e)}
            ) from e

        if not isinstance(payload, dict):
            raise MalformedPrincipalError(
                f"Header '{self.header}' must carry a JSON object",
                {"header": self.header, "type": type(payload).__name__}
            )
        return payload
