"""SchoolDesk: data access and IPC controllers for a desktop school-management app."""

__version__ = "0.1.0"
