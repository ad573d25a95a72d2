"""DDS type generation from IDL files and scenario-driven workload orchestration."""

__version__ = "0.1.0"

__all__ = [
    "bluechi",
    "build",
    "dds_settings",
    "generator",
    "idl",
    "idl_types",
    "manager",
    "receiver",
    "status",
]