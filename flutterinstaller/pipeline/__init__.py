"""
Pipeline agent integration.

Reads task inputs and agent variables, publishes pipeline variables and
reports the final task result using the agent's logging-command protocol.
"""

from .agent import TaskResult, PipelineAgent, format_command

__all__ = ["TaskResult", "PipelineAgent", "format_command"]
