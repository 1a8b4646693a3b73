# -*- test-case-name: peerguard.test.test_policies -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Refusing connections from denied peers.
"""

from typing import Optional

from twisted.internet.interfaces import IAddress, IProtocol, IProtocolFactory
from twisted.logger import Logger
from twisted.protocols.policies import WrappingFactory

from peerguard.interfaces import IAccessController

__all__ = ["AccessControlFactory"]


class AccessControlFactory(WrappingFactory):
    """
    Wrap a server factory so that only peers allowed by an
    L{IAccessController} get a protocol.  Other connections are closed as
    soon as they are accepted.

    @ivar controller: The L{IAccessController} consulted for every
        connection.
    """

    _log = Logger()

    def __init__(
        self, wrappedFactory: IProtocolFactory, controller: IAccessController
    ) -> None:
        WrappingFactory.__init__(self, wrappedFactory)
        self.controller = controller

    def buildProtocol(self, addr: IAddress) -> Optional[IProtocol]:
        """
        Wrap a protocol from the wrapped factory if C{addr} is allowed.

        @return: L{None} if C{addr} is denied, which makes the reactor drop
            the connection.
        """
        if not self.controller.isPeerAllowed(addr):
            self._log.info("Refusing connection from {peer}", peer=addr)
            return None
        return WrappingFactory.buildProtocol(self, addr)
