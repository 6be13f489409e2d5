"""Persistence boundary: bulk insert of grouped work orders."""
