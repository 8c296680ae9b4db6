"""disk_agent.collectors package exports."""

from disk_agent.collectors.drives import DriveUsage, MountEntry, drive_detail, list_drives
from disk_agent.collectors.disk import Disk, DiscoveryContext, discover

__all__ = [
    "Disk",
    "DiscoveryContext",
    "DriveUsage",
    "MountEntry",
    "discover",
    "drive_detail",
    "list_drives",
]
