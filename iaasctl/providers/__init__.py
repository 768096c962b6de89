"""IaaS providers and healers."""
