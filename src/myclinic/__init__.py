"""Meet Your Clinic content pipeline: Google Alerts to blog drafts."""

__version__ = "0.1.0"
