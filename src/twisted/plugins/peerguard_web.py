# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

from twisted.application.service import ServiceMaker

PeerGuardWeb = ServiceMaker(
    "PeerGuard Web",
    "peerguard.tap",
    "A web server which only answers peers allowed by address rules.",
    "peerguard",
)
