"""Salon Admin Console backend: access control and admin provisioning."""
