"""
Agent Memory - Persistent Work Memory for Software Agents

This package stores arbitrary text as embedded chunks for semantic recall,
and tracks skill executions to recommend skills for new queries.
"""

__version__ = "1.0.0"
