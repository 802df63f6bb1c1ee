"""AgentTrace exception hierarchy.

All public exceptions inherit from AgentTraceError, giving callers a single
base class to catch when they want to handle any AgentTrace-specific failure
without swallowing unrelated errors.
"""


class AgentTraceError(Exception):
    """Base exception for all AgentTrace errors."""


class ScanError(AgentTraceError):
    """Raised when the directory traversal itself fails.

    Covers a missing scan root or a root that is not a directory. This is
    the only fatal condition in the detection pipeline; unreadable files
    and detector failures are skipped instead.
    """


class DetectorError(AgentTraceError):
    """Raised when a detector fails on a single file.

    The router catches the underlying exception, wraps it in this type and
    records it as a diagnostic. It never aborts the scan.
    """


class ConfigError(AgentTraceError):
    """Raised for invalid scan configuration.

    Covers malformed ``.agenttrace.yaml`` files, values of the wrong type,
    and filter values outside the known set (e.g. an unknown risk level).
    """
