# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Tests for L{peerguard.resource}.
"""

from typing import Dict, List

from zope.interface.verify import verifyObject

from twisted.internet.address import IPv4Address
from twisted.logger import Logger
from twisted.trial.unittest import SynchronousTestCase
from twisted.web import http
from twisted.web.resource import IResource, Resource, getChildForRequest
from twisted.web.static import Data
from twisted.web.test.requesthelper import DummyRequest

from peerguard.access import AccessController
from peerguard.resource import AccessControlResource, Forbidden


def requestFrom(host: str, path: List[bytes]) -> DummyRequest:
    request = DummyRequest(path)
    request.client = IPv4Address("TCP", host, 54321)
    return request


class AccessControlResourceTests(SynchronousTestCase):
    """
    Tests for L{AccessControlResource}.
    """

    def setUp(self) -> None:
        self.events: List[Dict[str, object]] = []
        self.patch(AccessControlResource, "_log", Logger(observer=self.events.append))
        self.controller = AccessController().addAllow("10.0.0.0/8")
        self.root = Resource()
        self.root.putChild(b"page", Data(b"hello", "text/plain"))
        self.resource = AccessControlResource(self.controller, self.root)

    def test_interface(self) -> None:
        """
        L{AccessControlResource} provides L{IResource}.
        """
        self.assertTrue(verifyObject(IResource, self.resource))

    def test_allowedChild(self) -> None:
        """
        Traversal from an allowed client reaches the wrapped resource's
        children.
        """
        request = requestFrom("10.1.2.3", [b"page"])
        child = getChildForRequest(self.resource, request)
        self.assertIsInstance(child, Data)
        self.assertEqual(child.render(request), b"hello")
        self.assertEqual(request.prepath, [b"page"])
        self.assertEqual(request.postpath, [])

    def test_deniedChild(self) -> None:
        """
        Traversal from a denied client ends at an empty 403 response.
        """
        request = requestFrom("11.0.0.1", [b"page"])
        child = getChildForRequest(self.resource, request)
        self.assertIsInstance(child, Forbidden)
        self.assertEqual(child.render(request), b"")
        self.assertEqual(request.responseCode, http.FORBIDDEN)
        [event] = self.events
        self.assertEqual(event["peer"], request.client)

    def test_render(self) -> None:
        """
        Rendering from an allowed client renders the wrapped resource,
        rendering from a denied one renders the rejection.
        """
        resource = AccessControlResource(self.controller, Data(b"root", "text/plain"))
        self.assertEqual(resource.render(requestFrom("10.1.2.3", [])), b"root")
        request = requestFrom("11.0.0.1", [])
        self.assertEqual(resource.render(request), b"")
        self.assertEqual(request.responseCode, http.FORBIDDEN)

    def test_customRejection(self) -> None:
        """
        Denied requests are handled by the C{rejected} resource when one is
        given.
        """
        rejected = Data(b"go away", "text/plain")
        resource = AccessControlResource(self.controller, self.root, rejected)
        request = requestFrom("11.0.0.1", [b"page"])
        child = getChildForRequest(resource, request)
        self.assertTrue(child.isLeaf)
        self.assertEqual(child.render(request), b"go away")
        request = requestFrom("11.0.0.1", [])
        self.assertEqual(resource.render(request), b"go away")

    def test_rejectionChildrenUnreachable(self) -> None:
        """
        A denied client cannot traverse into the children of a C{rejected}
        resource; every path renders the rejection itself.
        """
        rejected = Resource()
        rejected.putChild(b"page", Data(b"private", "text/plain"))
        rejected.render = lambda request: b"denied"
        resource = AccessControlResource(self.controller, self.root, rejected)
        request = requestFrom("11.0.0.1", [b"page"])
        child = getChildForRequest(resource, request)
        self.assertNotIsInstance(child, Data)
        self.assertEqual(child.render(request), b"denied")
        self.assertEqual(request.postpath, [])

    def test_defaultRejectionAtDepth(self) -> None:
        """
        A denied request for a nested path gets the empty 403 response, and
        the allowed tree is not consulted.
        """
        request = requestFrom("11.0.0.1", [b"page", b"deeper"])
        child = getChildForRequest(self.resource, request)
        self.assertIsInstance(child, Forbidden)
        self.assertEqual(request.prepath, [b"page"])
        self.assertEqual(request.postpath, [b"deeper"])

    def test_defaultWrapped(self) -> None:
        """
        Without a wrapped resource, allowed requests get a 404.
        """
        resource = AccessControlResource(self.controller)
        request = requestFrom("10.1.2.3", [])
        resource.render(request)
        self.assertEqual(request.responseCode, http.NOT_FOUND)

    def test_putChild(self) -> None:
        """
        Children cannot be added to L{AccessControlResource}.
        """
        self.assertRaises(
            NotImplementedError, self.resource.putChild, b"x", Resource()
        )
