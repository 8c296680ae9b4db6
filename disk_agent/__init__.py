"""disk-health-agent: discover mounted disks and report free-space ratios."""

__version__ = "0.1.0"
