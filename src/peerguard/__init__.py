# -*- test-case-name: peerguard -*-

# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
PeerGuard: allow or refuse peers by source address.

Build an L{AccessController} from ordered allow/deny patterns, then put it in
front of a protocol factory with L{peerguard.policies.AccessControlFactory}
or in front of a web resource with
L{peerguard.resource.AccessControlResource}.
"""

from peerguard._version import __version__
from peerguard._rules import Action, ExactMatch, PrefixMatch, Rule
from peerguard._parse import parsePattern
from peerguard.access import AccessController, packAddress
from peerguard.error import InvalidPatternError

__all__ = [
    "__version__",
    "AccessController",
    "Action",
    "ExactMatch",
    "InvalidPatternError",
    "PrefixMatch",
    "Rule",
    "packAddress",
    "parsePattern",
]
