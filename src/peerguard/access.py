# -*- test-case-name: peerguard.test.test_access -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Allowing and denying peers by address.

Rules are evaluated in the order they were added and the first one matching
the peer decides; there is no preference for more specific rules.  For
example, with::

    controller = AccessController().addAllow("10.0.0.0/8").addDeny("10.1.2.3")

C{10.1.2.3} is allowed, because the first rule already matches it.  A peer
matching no rule gets the default verdict, which denies unless told
otherwise.
"""

import socket
from typing import Iterable, Optional, Tuple

from zope.interface import implementer

from constantly import NamedConstant

from twisted.internet.address import IPv4Address, IPv6Address
from twisted.internet.interfaces import IAddress
from twisted.logger import Logger

from peerguard._parse import parsePattern
from peerguard._rules import Action, PrefixMatch, Rule
from peerguard._ruleset import RuleSet
from peerguard.interfaces import IAccessController

__all__ = ["AccessController", "packAddress"]

_IPV4_MAPPED_PREFIX = b"\x00" * 10 + b"\xff\xff"


def packAddress(peer: IAddress) -> Optional[bytes]:
    """
    Get the packed form of a peer's IP address.

    @param peer: The address of a peer, as given to
        L{IProtocolFactory.buildProtocol} or returned by
        L{IRequest.getClientAddress}.

    @return: 4 bytes for an IPv4 peer, including one reported as an
        IPv4-mapped IPv6 address by a dual-stack port; 16 bytes for any
        other IPv6 peer; L{None} for peers which do not have an IP address or
        whose host cannot be parsed.
    """
    if isinstance(peer, IPv4Address):
        try:
            return socket.inet_pton(socket.AF_INET, peer.host)
        except OSError:
            return None
    if isinstance(peer, IPv6Address):
        host = peer.host.split("%", 1)[0]
        try:
            packed = socket.inet_pton(socket.AF_INET6, host)
        except OSError:
            return None
        if packed.startswith(_IPV4_MAPPED_PREFIX):
            return packed[len(_IPV4_MAPPED_PREFIX) :]
        return packed
    return None


@implementer(IAccessController)
class AccessController:
    """
    An ordered list of allow and deny rules.

    @ivar defaultAllow: The verdict for peers matching no rule.
    """

    _log = Logger()

    def __init__(self, defaultAllow: bool = False) -> None:
        self.defaultAllow = defaultAllow
        self._ruleSet = RuleSet()

    @classmethod
    def fromRules(
        cls,
        rules: Iterable[Tuple[NamedConstant, str]],
        defaultAllow: bool = False,
    ) -> "AccessController":
        """
        Build a controller from a complete configuration.

        @param rules: C{(action, pattern)} pairs in evaluation order, where
            C{action} is L{Action.ALLOW} or L{Action.DENY}.
        @param defaultAllow: The verdict for peers matching no rule.

        @raise peerguard.error.InvalidPatternError: if any pattern is
            invalid.
        """
        controller = cls(defaultAllow)
        compiled = [controller._compile(action, pattern) for action, pattern in rules]
        controller._ruleSet.extend(compiled)
        controller._logAdded(compiled)
        return controller

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return self._ruleSet.snapshot()

    def isDefaultAllow(self) -> bool:
        return self.defaultAllow

    def setDefaultAllow(self, defaultAllow: bool) -> "AccessController":
        self.defaultAllow = defaultAllow
        return self

    def _compile(self, action: NamedConstant, pattern: str) -> Rule:
        matcher = parsePattern(pattern)
        if isinstance(matcher, PrefixMatch) and not matcher.isSatisfiable():
            self._log.warn(
                "Rule {action} {pattern!r} can never match: the address has "
                "bits set outside of its mask",
                action=action.name,
                pattern=pattern,
            )
        return Rule(action, pattern, matcher)

    def _logAdded(self, rules: Iterable[Rule]) -> None:
        for rule in rules:
            self._log.debug(
                "Added {action} rule for {pattern!r}",
                action=rule.action.name,
                pattern=rule.pattern,
            )

    def addAllow(self, pattern: str) -> "AccessController":
        """
        Allow peers matching C{pattern}, unless an earlier rule matched them.

        @param pattern: A literal address (C{192.168.1.5},
            C{2001:db8:0:0:0:0:0:1}), a wildcard address (C{192.168.*.*},
            C{2001:db8:*:*:*:*:*:*}) or a CIDR network (C{192.168.1.0/24},
            C{2001:db8:0:0:0:0:0:0/32}).

        @raise peerguard.error.InvalidPatternError: if C{pattern} is not
            valid.  No rule is added.
        """
        rule = self._compile(Action.ALLOW, pattern)
        self._ruleSet.append(rule)
        self._logAdded([rule])
        return self

    def addDeny(self, pattern: str) -> "AccessController":
        """
        Deny peers matching C{pattern}, unless an earlier rule matched them.

        @see: L{addAllow} for the forms C{pattern} may take.
        """
        rule = self._compile(Action.DENY, pattern)
        self._ruleSet.append(rule)
        self._logAdded([rule])
        return self

    def clearRules(self) -> "AccessController":
        count = self._ruleSet.clear()
        self._log.debug("Cleared {count} rules", count=count)
        return self

    def isAllowed(self, address: bytes) -> bool:
        """
        @see: L{IAccessController.isAllowed}
        """
        for rule in self._ruleSet.snapshot():
            if rule.matches(address):
                return not rule.isDeny
        return self.defaultAllow

    def isPeerAllowed(self, peer: IAddress) -> bool:
        """
        @see: L{IAccessController.isPeerAllowed}
        """
        address = packAddress(peer)
        if address is None:
            return self.defaultAllow
        return self.isAllowed(address)

    def __repr__(self) -> str:
        return "<{} defaultAllow={} rules={!r}>".format(
            self.__class__.__name__, self.defaultAllow, list(self.rules)
        )
