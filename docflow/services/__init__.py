"""Collaborator adapters for DocFlow."""

from docflow.services.directory import SqlPartyDirectory
