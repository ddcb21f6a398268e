"""Client singletons for external API interactions."""
from vehicle_sync.clients.cms_client import CMSClient

__all__ = ["CMSClient"]
