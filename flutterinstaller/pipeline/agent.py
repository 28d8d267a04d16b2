"""
Pipeline agent interface.

The build agent passes task inputs and agent variables to the task through
environment variables, and the task talks back by printing logging commands
on stdout:

    ##vso[task.setvariable variable=FlutterToolPath;issecret=false;]/path
    ##vso[task.complete result=Succeeded;]Installed

PipelineAgent wraps both directions so the rest of the installer never
touches os.environ or stdout directly.
"""

import logging
import os
import sys
from enum import Enum
from typing import Dict, MutableMapping, Optional, TextIO

from flutterinstaller.core.exceptions import InputRequiredError

logger = logging.getLogger(__name__)


class TaskResult(Enum):
    """Final outcome reported to the agent."""

    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


def _escape_data(value: str) -> str:
    return value.replace("%", "%AZP25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return (
        _escape_data(value)
        .replace("]", "%5D")
        .replace(";", "%3B")
    )


def format_command(command: str, properties: Dict[str, str], message: str = "") -> str:
    """
    Render one logging command line.

    Example:
        >>> format_command("task.complete", {"result": "Succeeded"}, "Installed")
        '##vso[task.complete result=Succeeded;]Installed'
    """
    props = "".join(
        f"{key}={_escape_property(value)};" for key, value in properties.items()
    )
    head = f"{command} {props}" if props else command
    return f"##vso[{head}]{_escape_data(message)}"


class PipelineAgent:
    """Access to task inputs, agent variables and task result signaling."""

    def __init__(
        self,
        environ: Optional[MutableMapping[str, str]] = None,
        stream: Optional[TextIO] = None,
        inputs: Optional[Dict[str, str]] = None,
    ):
        """
        Args:
            environ: Environment mapping (default: os.environ)
            stream: Where logging commands are written (default: sys.stdout)
            inputs: Input values that take precedence over INPUT_* variables
        """
        self.environ = os.environ if environ is None else environ
        self.inputs = dict(inputs or {})
        self.stream = stream
        self.result: Optional[TaskResult] = None

    def _emit(self, line: str) -> None:
        stream = self.stream or sys.stdout
        stream.write(line + "\n")
        stream.flush()

    @staticmethod
    def input_key(name: str) -> str:
        """Environment variable holding task input ``name``."""
        return "INPUT_" + name.replace(" ", "_").upper()

    @staticmethod
    def variable_key(name: str) -> str:
        """Environment variable holding agent variable ``name``."""
        return name.replace(".", "_").replace(" ", "_").upper()

    def get_input(self, name: str, required: bool = False) -> str:
        """
        Read a task input.

        Raises:
            InputRequiredError: If required and empty or missing
        """
        if name in self.inputs:
            value = self.inputs[name].strip()
        else:
            value = self.environ.get(self.input_key(name), "").strip()
        if required and not value:
            raise InputRequiredError(name)
        logger.debug(f"{name}={value}")
        return value

    def get_variable(self, name: str) -> Optional[str]:
        """Read an agent variable, None when unset."""
        return self.environ.get(self.variable_key(name))

    @property
    def debug_enabled(self) -> bool:
        return (self.get_variable("System.Debug") or "").lower() == "true"

    def debug(self, message: str) -> None:
        """Log a debug message, forwarding it to the agent when System.Debug is on."""
        logger.debug(message)
        if self.debug_enabled:
            self._emit(format_command("task.debug", {}, message))

    def set_variable(self, name: str, value: str, secret: bool = False) -> None:
        """Publish a pipeline variable for downstream steps."""
        self.environ[self.variable_key(name)] = value
        self._emit(
            format_command(
                "task.setvariable",
                {"variable": name, "issecret": str(secret).lower()},
                value,
            )
        )
        logger.debug(f"Set variable {name}")

    def set_result(self, result: TaskResult, message: str) -> None:
        """Report the task outcome."""
        self.result = result
        if result is TaskResult.FAILED:
            self._emit(format_command("task.logissue", {"type": "error"}, message))
        self._emit(format_command("task.complete", {"result": result.value}, message))


__all__ = ["TaskResult", "PipelineAgent", "format_command"]
