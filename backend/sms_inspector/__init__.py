"""Backend for the SMS inspector dashboard."""
