# -*- test-case-name: peerguard.test.test_resource -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Answering requests from denied peers with C{403 Forbidden}.
"""

from typing import Optional

from zope.interface import implementer

from twisted.logger import Logger
from twisted.web import http
from twisted.web.iweb import IRequest
from twisted.web.pages import notFound
from twisted.web.resource import IResource, Resource

from peerguard.interfaces import IAccessController

__all__ = ["AccessControlResource", "Forbidden"]


class Forbidden(Resource):
    """
    A leaf resource responding C{403 Forbidden} with an empty body.
    """

    isLeaf = True

    def render(self, request: IRequest) -> bytes:
        request.setResponseCode(http.FORBIDDEN)
        return b""


class _RejectedLeaf(Resource):
    """
    End traversal for a denied request and render the rejection, whatever
    children the rejection resource has.
    """

    isLeaf = True

    def __init__(self, rejected: IResource) -> None:
        super().__init__()
        self._rejected = rejected

    def render(self, request: IRequest) -> object:
        return self._rejected.render(request)


@implementer(IResource)
class AccessControlResource:
    """
    Put a resource behind an L{IAccessController}.

    Every request is checked against the controller using the client's
    address.  Allowed requests are handled by the wrapped resource; denied
    ones by the C{rejected} resource.

    @ivar controller: The L{IAccessController} consulted for every request.
    """

    isLeaf = False

    _log = Logger()

    def __init__(
        self,
        controller: IAccessController,
        wrappedResource: Optional[IResource] = None,
        rejected: Optional[IResource] = None,
    ) -> None:
        """
        @param controller: The L{IAccessController} to consult.
        @param wrappedResource: Handles allowed requests.  Without one,
            allowed requests get a C{404 Not Found} page.
        @param rejected: Handles denied requests.  Without one, denied
            requests get an empty C{403 Forbidden} response.
        """
        self.controller = controller
        if wrappedResource is None:
            wrappedResource = notFound()
        if rejected is None:
            rejected = Forbidden()
        self._wrappedResource = wrappedResource
        self._rejected = rejected
        if not rejected.isLeaf:
            rejected = _RejectedLeaf(rejected)
        self._rejectedLeaf = rejected

    def _isAllowed(self, request: IRequest) -> bool:
        peer = request.getClientAddress()
        if self.controller.isPeerAllowed(peer):
            return True
        self._log.info(
            "Forbidding {method} {uri} from {peer}",
            method=request.method,
            uri=request.uri,
            peer=peer,
        )
        return False

    def render(self, request: IRequest) -> object:
        """
        Render the wrapped resource, or the rejection if the client is
        denied.
        """
        if self._isAllowed(request):
            return self._wrappedResource.render(request)
        return self._rejected.render(request)

    def getChildWithDefault(self, path: bytes, request: IRequest) -> IResource:
        """
        Hand traversal over to the wrapped resource if the client is allowed,
        putting C{path} back on the request so the wrapped resource sees the
        full remaining path.  A denied client gets a leaf which renders the
        rejection, so traversal never reaches the rejection's children.
        """
        if not self._isAllowed(request):
            return self._rejectedLeaf
        request.postpath.insert(0, request.prepath.pop())
        return self._wrappedResource

    def putChild(self, path: bytes, child: IResource) -> None:
        raise NotImplementedError(
            "Add children to the wrapped resource, not to "
            "AccessControlResource"
        )
