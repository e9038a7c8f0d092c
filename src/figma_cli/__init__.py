"""Figma REST API command-line tools."""

from figma_cli.api import FigmaApi
from figma_cli.errors import FigmaApiError, FigmaCliError
from figma_cli.models.node import Node
from figma_cli.protocols import ApiProtocol

__all__ = ["ApiProtocol", "FigmaApi", "FigmaApiError", "FigmaCliError", "Node"]
