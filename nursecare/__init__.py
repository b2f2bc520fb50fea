"""NurseCare: patient records, care tasks and notifications for nursing staff."""

__version__ = "1.0.0"
