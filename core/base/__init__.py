"""Base classes shared by the service layer."""
