"""
Flutter installer CLI argument parser.

This module implements the command-line interface using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from flutterinstaller.core.platform import SUPPORTED_ARCHITECTURES

try:
    from importlib.metadata import version

    __version__ = version("flutter-installer")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """Flutter installer command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="flutter-installer",
            description="Install a Flutter SDK into the pipeline tool cache",
            epilog='Use "flutter-installer COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"flutter-installer {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./flutter-installer.yaml)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_resolve_command(subparsers)
        self._add_list_command(subparsers)

        return parser

    def _add_selection_arguments(self, parser):
        """Release selection flags shared by install and resolve."""
        parser.add_argument(
            "--channel",
            metavar="CHANNEL",
            help="Release channel, e.g. stable, beta, dev (default: INPUT_CHANNEL)",
        )
        parser.add_argument(
            "--sdk-version",
            dest="sdk_version",
            metavar="MODE",
            help="'latest' or 'custom' (default: INPUT_VERSION)",
        )
        parser.add_argument(
            "--custom-version",
            metavar="SEMVER",
            help="Explicit SDK version, e.g. 2.5.0 (default: INPUT_CUSTOMVERSION)",
        )
        parser.add_argument(
            "--manifest-url",
            metavar="URL",
            help="Origin hosting releases_<arch>.json",
        )
        parser.add_argument(
            "--cache-dir",
            type=Path,
            metavar="DIR",
            help="Tool cache root (default: Agent.ToolsDirectory)",
        )

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Install Flutter and publish FlutterToolPath",
            description="Resolve, download and cache a Flutter SDK, then set FlutterToolPath",
        )
        self._add_selection_arguments(parser)
        parser.add_argument(
            "--temp-dir",
            type=Path,
            metavar="DIR",
            help="Working directory for downloads (default: Agent.TempDirectory)",
        )
        parser.add_argument(
            "--no-verify",
            action="store_true",
            help="Skip SHA256 verification of the downloaded archive",
        )

    def _add_resolve_command(self, subparsers):
        """Add 'resolve' subcommand."""
        parser = subparsers.add_parser(
            "resolve",
            help="Show which release would be installed",
            description="Resolve the release for a channel/version without downloading it",
        )
        self._add_selection_arguments(parser)
        parser.add_argument(
            "--arch",
            choices=SUPPORTED_ARCHITECTURES,
            metavar="ARCH",
            help="Architecture token (macos|linux|windows) [default: host]",
        )

    def _add_list_command(self, subparsers):
        """Add 'list' subcommand."""
        parser = subparsers.add_parser(
            "list",
            help="List cached Flutter SDKs",
            description="List Flutter version specs present in the tool cache",
        )
        parser.add_argument(
            "--cache-dir",
            type=Path,
            metavar="DIR",
            help="Tool cache root (default: Agent.ToolsDirectory)",
        )
        parser.add_argument(
            "--arch",
            choices=SUPPORTED_ARCHITECTURES,
            metavar="ARCH",
            help="Architecture token (macos|linux|windows) [default: host]",
        )

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Log records go to stderr; stdout is reserved for agent commands.
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Returns:
            Exit code from command handler
        """
        command_map = {
            "install": "flutterinstaller.cli.commands.install",
            "resolve": "flutterinstaller.cli.commands.resolve",
            "list": "flutterinstaller.cli.commands.list_cached",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
