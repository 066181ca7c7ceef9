"""Snapshot document: one installation's configuration in portable form."""
import base64
import binascii
import copy
import json
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Union

from .errors import ParseError

MAIN_CONFIG = "mainConfig"
CERTIFICATES = "certificates"
SERVER_PROFILES = "serverProfiles"
ACCOUNT_PROFILES = "accountProfiles"

# Export order
RECOGNIZED_SECTIONS = (MAIN_CONFIG, CERTIFICATES, SERVER_PROFILES, ACCOUNT_PROFILES)


def encode_certificates(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii") if data else ""


def decode_certificates(value: Any) -> bytes:
    """Decode the certificates payload; missing or empty means no certificates."""
    if value is None or value == "":
        return b""
    if not isinstance(value, str):
        raise ParseError(
            f"Section '{CERTIFICATES}' must be a string, got {type(value).__name__}"
        )
    try:
        return base64.b64decode(value.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ParseError(f"Section '{CERTIFICATES}' is not valid base64: {e}") from e


class Snapshot:
    """
    Ordered, read-only mapping of section name to section payload.

    Unknown sections are kept in document order so that a document written
    by a newer version passes through unchanged.
    """

    def __init__(self, sections: Mapping[str, Any]):
        self._sections = MappingProxyType(copy.deepcopy(dict(sections)))

    @property
    def sections(self) -> Mapping[str, Any]:
        return self._sections

    def __getitem__(self, name: str) -> Any:
        return self._sections[name]

    def __contains__(self, name: object) -> bool:
        return name in self._sections

    def __iter__(self):
        return iter(self._sections)

    def __len__(self) -> int:
        return len(self._sections)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Snapshot):
            return NotImplemented
        return dict(self._sections) == dict(other._sections)

    def __repr__(self) -> str:
        return f"Snapshot(sections={list(self._sections)})"

    @property
    def recognized_sections(self) -> list[str]:
        return [name for name in self._sections if name in RECOGNIZED_SECTIONS]

    @property
    def unknown_sections(self) -> list[str]:
        return [name for name in self._sections if name not in RECOGNIZED_SECTIONS]

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(dict(self._sections))

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, document: Union[str, bytes]) -> "Snapshot":
        """
        Parse a snapshot document.

        Raises:
            ParseError: If the document is not a JSON object
        """
        try:
            data = json.loads(document)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"Snapshot is not valid JSON: {e}") from e

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Any) -> "Snapshot":
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ParseError(
                f"Snapshot must be an object, got {type(data).__name__}"
            )
        return cls(data)
