"""Project Library service - people, organizations and the owners that act for them."""

__version__ = "0.1.0"
