"""Find the host's public IP address through DNS TXT lookups or HTTP echo services."""

__version__ = "0.1.0"