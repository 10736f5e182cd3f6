"""devsetup: idempotent developer workstation provisioning."""

__version__ = "0.1.0"
