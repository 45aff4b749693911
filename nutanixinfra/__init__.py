"""Resource models for Nutanix cluster infrastructure: clusters, machines, templates and conditions."""

__version__ = "0.1.0"
__all__ = ["cluster", "common", "machine", "meta"]