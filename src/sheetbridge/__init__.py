"""SheetBridge - Google Sheets editing backend and conversion reporting service."""

__version__ = "0.1.0"
