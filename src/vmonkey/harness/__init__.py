"""Retry, verification and debug protocol for test checks."""

from vmonkey.harness.classifier import FailureClassifier, attach_debugger
from vmonkey.harness.errors import HarnessError, SetResolutionError, VerificationFailure
from vmonkey.harness.interface import TestCaseInterface
from vmonkey.harness.retry import RetryScope, RetryStack
from vmonkey.harness.selection import NamedRef, NamePattern, TargetList, coerce_set_spec, resolve

__all__ = [
    "FailureClassifier",
    "HarnessError",
    "NamePattern",
    "NamedRef",
    "RetryScope",
    "RetryStack",
    "SetResolutionError",
    "TargetList",
    "TestCaseInterface",
    "VerificationFailure",
    "attach_debugger",
    "coerce_set_spec",
    "resolve",
]
