"""Agent Lab: a LangChain tool-calling agent service."""

__version__ = "0.1.0"
