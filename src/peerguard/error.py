# -*- test-case-name: peerguard.test.test_parse -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Exceptions raised by peerguard.
"""

__all__ = ["InvalidPatternError"]


class InvalidPatternError(ValueError):
    """
    A peer pattern is none of the recognized address, wildcard or CIDR forms.

    @ivar pattern: The rejected pattern text.
    @ivar reason: A short explanation of why it was rejected.
    """

    def __init__(self, pattern: str, reason: str = "unrecognized form") -> None:
        super().__init__(pattern, reason)
        self.pattern = pattern
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.pattern!r} is not a valid IP pattern: {self.reason}"
