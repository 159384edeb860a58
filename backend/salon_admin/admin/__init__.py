"""Admin console endpoints and their access enforcement."""
