"""Settings shapes persisted by the config store.

Both models accept unknown keys so that settings written by a newer
installation survive an export/import round trip unchanged.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class MainConfig(BaseModel):
    """Installation-wide settings (shared by all server profiles)."""
    model_config = ConfigDict(extra="allow")

    password: str = ""  # hashed master password
    default_profile: Optional[str] = None
    session_timeout: int = 30  # minutes
    allowed_hosts: list[str] = Field(default_factory=list)
    log_level: str = "WARNING"
    log_destination: str = "SYSLOG"


class ProfileSettings(BaseModel):
    """Server configuration for one managed directory deployment."""
    model_config = ConfigDict(extra="allow")

    name: str
    server_url: str = "ldap://localhost:389"
    cache_timeout: int = 5
    admins: list[str] = Field(default_factory=list)
    # account type -> LDAP suffix
    suffixes: dict[str, str] = Field(default_factory=dict)
    # account type -> attributes shown in list views
    list_attributes: dict[str, list[str]] = Field(default_factory=dict)
    max_list_entries: int = 30
    default_language: str = "en_GB.utf8"
    script_path: Optional[str] = None
    script_server: Optional[str] = None
    module_settings: dict[str, Any] = Field(default_factory=dict)
    active_types: list[str] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serializable form without the name (the name is the file/key)."""
        data = self.model_dump(mode="json")
        data.pop("name", None)
        return data

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> "ProfileSettings":
        data = {k: v for k, v in (data or {}).items() if k != "name"}
        return cls(name=name, **data)
