"""
Install command implementation.

Runs the pipeline task: resolve, download on cache miss, publish FlutterToolPath.
"""

import logging

from flutterinstaller.cli.utils import build_config, task_inputs
from flutterinstaller.pipeline.agent import PipelineAgent, TaskResult
from flutterinstaller.sdk.installer import run_task

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for a failed task)
    """
    agent = PipelineAgent(inputs=task_inputs(args))

    try:
        config = build_config(args)
    except Exception as e:
        agent.set_result(TaskResult.FAILED, str(e))
        return 1

    result = run_task(agent, config)
    return 0 if result is TaskResult.SUCCEEDED else 1
