"""CLI module for Site Scuba.

This package provides the command-line interface for running audits and
rendering their reports.
"""

from .runner import (
    # Exit codes
    ExitCode,

    # Main CLI runner
    CLIRunner,
    configure_logging,
)
from .summary import ReportAggregator, SummaryReporter

__all__ = [
    # Exit codes
    'ExitCode',

    # Main CLI runner
    'CLIRunner',
    'configure_logging',

    # Reporting
    'ReportAggregator',
    'SummaryReporter',
]
