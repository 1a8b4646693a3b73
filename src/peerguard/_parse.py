# -*- test-case-name: peerguard.test.test_parse -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Parsing of peer patterns.

Six forms are recognized, tried in this order:

    - C{a.b.c.d}: a literal IPv4 address;
    - C{a.b.*.*}: an IPv4 address with some octets replaced by C{*};
    - C{a.b.c.d/n}: an IPv4 network in CIDR notation, C{0 <= n <= 32};
    - C{a:b:c:d:e:f:g:h}: a literal IPv6 address, all eight groups present;
    - C{a:b:*:*:*:*:*:*}: an IPv6 address with some groups replaced by C{*};
    - C{a:b:c:d:e:f:g:h/n}: an IPv6 network in CIDR notation,
      C{0 <= n <= 128}.

IPv6 addresses must be written out in full; C{::} compression is not
understood.
"""

from typing import Callable, List, Optional, Sequence, Tuple

import attr

from peerguard._rules import ExactMatch, Matcher, PrefixMatch
from peerguard.error import InvalidPatternError

__all__ = ["parsePattern", "prefixMask"]

WILDCARD = "*"

_DECIMAL = frozenset("0123456789")
_HEXADECIMAL = frozenset("0123456789abcdefABCDEF")


@attr.s(frozen=True, slots=True)
class _Family:
    """
    How addresses of one family are written.

    @ivar separator: The character between groups.
    @ivar groups: How many groups a full address has.
    @ivar groupBytes: How many bytes each group packs to.
    @ivar digits: The characters a group may contain.
    @ivar maxDigits: The longest a group may be.
    @ivar base: The base groups are written in.
    @ivar maxPrefixDigits: The longest a CIDR prefix length may be.
    """

    separator: str = attr.ib()
    groups: int = attr.ib()
    groupBytes: int = attr.ib()
    digits: frozenset = attr.ib()
    maxDigits: int = attr.ib()
    base: int = attr.ib()
    maxPrefixDigits: int = attr.ib()

    @property
    def length(self) -> int:
        return self.groups * self.groupBytes

    @property
    def maxPrefixLength(self) -> int:
        return self.length * 8

    def isGroup(self, text: str) -> bool:
        return 0 < len(text) <= self.maxDigits and set(text) <= self.digits

    def isPrefixLength(self, text: str) -> bool:
        return 0 < len(text) <= self.maxPrefixDigits and set(text) <= _DECIMAL

    def split(self, text: str) -> Optional[List[str]]:
        """
        Split C{text} into groups, or return L{None} if it does not have
        exactly the right number of them.
        """
        parts = text.split(self.separator)
        if len(parts) != self.groups:
            return None
        return parts


_IPV4 = _Family(".", 4, 1, _DECIMAL, 3, 10, 2)
_IPV6 = _Family(":", 8, 2, _HEXADECIMAL, 4, 16, 3)


def _packGroups(pattern: str, family: _Family, groups: Sequence[str]) -> bytes:
    """
    Pack the textual groups of an address, treating wildcards as zero.

    @raise InvalidPatternError: if a group does not fit in its bytes.
    """
    packed = bytearray()
    limit = 1 << (8 * family.groupBytes)
    for group in groups:
        value = 0 if group == WILDCARD else int(group, family.base)
        if value >= limit:
            raise InvalidPatternError(
                pattern, f"component {group!r} is out of range"
            )
        packed += value.to_bytes(family.groupBytes, "big")
    return bytes(packed)


def prefixMask(prefixLength: int, length: int) -> bytes:
    """
    Build a network mask.

    @param prefixLength: How many leading bits are set.
    @param length: How many bytes long the mask is.

    @return: C{length} bytes, the first C{prefixLength} bits of which are
        ones and the rest zeros.
    """
    mask = bytearray(length)
    for i in range(length):
        if prefixLength >= 8:
            mask[i] = 0xFF
            prefixLength -= 8
        elif prefixLength > 0:
            mask[i] = (0xFF << (8 - prefixLength)) & 0xFF
            prefixLength = 0
        else:
            break
    return bytes(mask)


def _exact(pattern: str, family: _Family) -> Optional[Matcher]:
    groups = family.split(pattern)
    if groups is None or not all(family.isGroup(g) for g in groups):
        return None
    return ExactMatch(_packGroups(pattern, family, groups))


def _wildcard(pattern: str, family: _Family) -> Optional[Matcher]:
    groups = family.split(pattern)
    if groups is None or not all(
        g == WILDCARD or family.isGroup(g) for g in groups
    ):
        return None
    groupMask = b"\xff" * family.groupBytes
    groupClear = b"\x00" * family.groupBytes
    mask = b"".join(groupClear if g == WILDCARD else groupMask for g in groups)
    return PrefixMatch(mask, _packGroups(pattern, family, groups))


def _slash(pattern: str, family: _Family) -> Optional[Matcher]:
    address, slash, length = pattern.partition("/")
    if not slash or not family.isPrefixLength(length):
        return None
    groups = family.split(address)
    if groups is None or not all(family.isGroup(g) for g in groups):
        return None
    prefixLength = int(length)
    if prefixLength > family.maxPrefixLength:
        raise InvalidPatternError(
            pattern,
            f"prefix length {prefixLength} is longer than "
            f"{family.maxPrefixLength}",
        )
    return PrefixMatch(
        prefixMask(prefixLength, family.length),
        _packGroups(pattern, family, groups),
    )


_Grammar = Callable[[str, _Family], Optional[Matcher]]

_GRAMMARS: Tuple[Tuple[_Grammar, _Family], ...] = (
    (_exact, _IPV4),
    (_wildcard, _IPV4),
    (_slash, _IPV4),
    (_exact, _IPV6),
    (_wildcard, _IPV6),
    (_slash, _IPV6),
)


def parsePattern(pattern: str) -> Matcher:
    """
    Compile a peer pattern.

    @param pattern: One of the forms described in L{the module
        documentation <peerguard._parse>}.

    @return: An L{ExactMatch} for a literal address, a L{PrefixMatch} for a
        wildcard or CIDR pattern.

    @raise InvalidPatternError: if C{pattern} has none of the recognized
        forms, or has one of them with an octet above 255 or a prefix length
        longer than the address.
    """
    if not isinstance(pattern, str):
        raise InvalidPatternError(str(pattern), "not a string")
    for grammar, family in _GRAMMARS:
        matcher = grammar(pattern, family)
        if matcher is not None:
            return matcher
    raise InvalidPatternError(pattern)
