"""Remote script dispatch service for ConfigMgr AdminService."""

__version__ = "0.1.0"
