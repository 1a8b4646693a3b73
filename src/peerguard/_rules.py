# -*- test-case-name: peerguard.test.test_rules -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Compiled access rules and the matching of packed addresses against them.

A pattern compiles to one of two matchers: L{ExactMatch} for a literal
address, or L{PrefixMatch} for wildcard and CIDR patterns, which are the same
thing written differently.  Both carry packed addresses, 4 bytes for IPv4 and
16 bytes for IPv6, and an address of one family never matches a matcher of
the other.
"""

from typing import Union

import attr
from constantly import NamedConstant, Names

__all__ = [
    "Action",
    "ExactMatch",
    "PrefixMatch",
    "Matcher",
    "Rule",
    "matches",
]

IPV4_LENGTH = 4
IPV6_LENGTH = 16


def _familyLength(
    instance: object, attribute: "attr.Attribute[bytes]", value: bytes
) -> None:
    if len(value) not in (IPV4_LENGTH, IPV6_LENGTH):
        raise ValueError(
            f"{attribute.name} must be {IPV4_LENGTH} or {IPV6_LENGTH} bytes "
            f"long, not {len(value)}"
        )


class Action(Names):
    """
    What a rule does to the peers it matches.
    """

    ALLOW = NamedConstant()
    DENY = NamedConstant()


@attr.s(frozen=True, slots=True)
class ExactMatch:
    """
    Match exactly one address.

    @ivar address: The packed address.
    """

    address: bytes = attr.ib(converter=bytes, validator=_familyLength)


@attr.s(frozen=True, slots=True)
class PrefixMatch:
    """
    Match every address which, masked with C{mask}, equals C{prefix}.

    C{prefix} is kept as written; bits it sets outside of C{mask} are not
    cleared, so such a matcher can never match anything.
    """

    mask: bytes = attr.ib(converter=bytes, validator=_familyLength)
    prefix: bytes = attr.ib(converter=bytes, validator=_familyLength)

    @prefix.validator
    def _sameFamily(self, attribute: "attr.Attribute[bytes]", value: bytes) -> None:
        if len(value) != len(self.mask):
            raise ValueError(
                f"mask and prefix differ in length ({len(self.mask)} and "
                f"{len(value)} bytes)"
            )

    def isSatisfiable(self) -> bool:
        """
        Can any address match?

        @return: C{False} if C{prefix} has a bit set where C{mask} has not.
        """
        return all(p & ~m & 0xFF == 0 for m, p in zip(self.mask, self.prefix))


Matcher = Union[ExactMatch, PrefixMatch]


def matches(matcher: Matcher, address: bytes) -> bool:
    """
    Does C{address} match C{matcher}?

    @param matcher: An L{ExactMatch} or a L{PrefixMatch}.
    @param address: A packed address of any length.  Lengths other than the
        matcher's never match.
    """
    if isinstance(matcher, ExactMatch):
        return matcher.address == address
    if isinstance(matcher, PrefixMatch):
        if len(address) != len(matcher.mask):
            return False
        for octet, mask, prefix in zip(address, matcher.mask, matcher.prefix):
            if octet & mask != prefix:
                return False
        return True
    raise TypeError(f"Unknown matcher {matcher!r}")


@attr.s(frozen=True, slots=True, repr=False)
class Rule:
    """
    One entry of an access control list.

    @ivar action: L{Action.ALLOW} or L{Action.DENY}.
    @ivar pattern: The text the rule was parsed from.
    @ivar matcher: The compiled form of C{pattern}.
    """

    action: NamedConstant = attr.ib(
        validator=attr.validators.in_(list(Action.iterconstants()))
    )
    pattern: str = attr.ib()
    matcher: Matcher = attr.ib(
        validator=attr.validators.instance_of((ExactMatch, PrefixMatch))
    )

    @property
    def isDeny(self) -> bool:
        return self.action is Action.DENY

    def matches(self, address: bytes) -> bool:
        return matches(self.matcher, address)

    def __repr__(self) -> str:
        return f"<Rule {self.action.name} {self.pattern!r}>"
