#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Error definitions for the haproxyStats package.
Custom exception classes for startup failures and malformed statistics exports.
Uses Python 3.10+ type annotations.
"""

from typing import Optional


class HaproxyStatsError(Exception):
    """Base exception class for all haproxyStats errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)

    def get_suggestions(self) -> list[str]:
        """
        Get suggestions for fixing the error.

        Returns:
            List of suggestion strings
        """
        return ["Run with --log-level debug for more detailed information"]


class UsageError(HaproxyStatsError):
    """Exception for a wrong number of command-line arguments."""

    def get_suggestions(self) -> list[str]:
        return ["Pass exactly one statistics file, e.g. haproxy-stats 1700000000.lb01.stats.csv"]


class FilenameFormatError(HaproxyStatsError):
    """Exception for a statistics filename that does not carry capture metadata."""

    def __init__(self, message: str, file_name: Optional[str] = None, *args, **kwargs):
        self.file_name = file_name
        super().__init__(message, *args, **kwargs)

    def get_suggestions(self) -> list[str]:
        """
        Get suggestions for fixing filename errors.

        Returns:
            List of suggestion strings
        """
        suggestions = []

        if "timestamp" in self.message:
            suggestions.append("The first component must be a Unix epoch in seconds")
            suggestions.append("Example: 1709251200.lb01.stats.csv")
        else:
            suggestions.append("Name the file <unix-epoch>.<hostname>.<anything>.csv")

        return suggestions


class MalformedRowError(HaproxyStatsError):
    """Exception for a data row whose column count does not match the header."""

    def __init__(self, message: str, line_number: Optional[int] = None,
                 expected: int = 0, actual: int = 0, *args, **kwargs):
        self.line_number = line_number
        self.expected = expected
        self.actual = actual
        super().__init__(message, *args, **kwargs)


class SchemaMismatchError(HaproxyStatsError):
    """Exception for a statistics export whose columns differ from the expected layout."""

    def __init__(self, message: str, fields: Optional[list[str]] = None, *args, **kwargs):
        self.fields = fields or []
        super().__init__(message, *args, **kwargs)

    def get_suggestions(self) -> list[str]:
        """
        Get suggestions for fixing schema errors.

        Returns:
            List of suggestion strings
        """
        suggestions = []

        if self.fields:
            suggestions.append(f"Columns involved: {', '.join(self.fields)}")
        if "collide" in self.message:
            suggestions.append("Rename the column in the export; @timestamp, @version and host are reserved")
        else:
            suggestions.append("Export the statistics with 'show stat' so every standard column is present")

        return suggestions


class ConfigurationError(HaproxyStatsError):
    """Exception for configuration-related errors."""

    def get_suggestions(self) -> list[str]:
        """
        Get suggestions for fixing configuration errors.

        Returns:
            List of suggestion strings
        """
        suggestions = []

        if "elasticsearch" in self.message:
            suggestions.append("Set 'elasticsearch' to the base URL of the indexing endpoint")
            suggestions.append("Or set the HAPROXY_STATS_ELASTICSEARCH environment variable")

        elif "config file" in self.message.lower():
            suggestions.append("Check that the config file exists and has correct permissions")
            suggestions.append("Use --config option to specify an alternate config file")

        if not suggestions:
            suggestions.append("Check your configuration settings and environment variables")

        return suggestions
