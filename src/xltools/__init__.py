"""xltools: agent-callable tools for reading and editing Excel workbooks."""

__version__ = "0.1.0"
