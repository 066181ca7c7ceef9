"""Configuration snapshot export/import for LDAP directory administration."""

__version__ = "0.1.0"
