"""Common utilities for DocFlow."""

from .logger import configure_logging
from .config import load_config, load_workflow_config, WorkflowConfig
