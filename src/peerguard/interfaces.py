# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Interfaces for peerguard.
"""

from zope.interface import Attribute, Interface

from twisted.internet.interfaces import IAddress

__all__ = ["IAccessController"]


class IAccessController(Interface):
    """
    An ordered list of allow and deny rules, plus a default verdict, which
    decides whether a peer may connect.
    """

    defaultAllow = Attribute(
        "C{True} if a peer matching no rule is allowed, C{False} otherwise."
    )

    rules = Attribute(
        "A L{tuple} of L{peerguard.Rule}, in the order they are evaluated."
    )

    def isDefaultAllow() -> bool:
        """
        Get the verdict for peers matching no rule.
        """

    def setDefaultAllow(defaultAllow: bool) -> "IAccessController":
        """
        Set the verdict for peers matching no rule.  The rules are unchanged.

        @return: This controller.
        """

    def isAllowed(address: bytes) -> bool:
        """
        Decide whether a packed address is allowed.

        @param address: 4 bytes for IPv4 or 16 bytes for IPv6.  An address of
            any other length matches no rule.

        @return: The verdict of the first matching rule, or C{defaultAllow}.
        """

    def isPeerAllowed(peer: IAddress) -> bool:
        """
        Decide whether a Twisted address object is allowed.

        @param peer: The peer, usually an L{IPv4Address} or L{IPv6Address}.
            Any other kind of address gets the default verdict.
        """

    def addAllow(pattern: str) -> "IAccessController":
        """
        Append a rule allowing peers matching C{pattern}.

        @raise peerguard.error.InvalidPatternError: if C{pattern} is not
            valid; no rule is added in that case.
        """

    def addDeny(pattern: str) -> "IAccessController":
        """
        Append a rule denying peers matching C{pattern}.

        @raise peerguard.error.InvalidPatternError: if C{pattern} is not
            valid; no rule is added in that case.
        """

    def clearRules() -> "IAccessController":
        """
        Remove every rule.  The default verdict is unchanged.
        """
