# -*- test-case-name: peerguard.test.test_tap -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Support for creating a web server that only answers allowed peers, with
twistd.
"""

import os

from twisted.application import service, strports
from twisted.python import usage
from twisted.web import server, static

from peerguard._parse import parsePattern
from peerguard._rules import Action
from peerguard.access import AccessController
from peerguard.error import InvalidPatternError
from peerguard.resource import AccessControlResource


class Options(usage.Options):
    synopsis = "[options]"
    longdesc = """\
Serves a directory over HTTP to the peers allowed by an ordered list of
--allow and --deny rules.  The first rule matching a peer decides; peers
matching no rule are refused unless --default-allow is given.  Refused
peers get an empty 403 Forbidden response.

Rules take the forms a.b.c.d, a.b.*.*, a.b.c.d/n, a:b:c:d:e:f:g:h,
a:b:*:*:*:*:*:* and a:b:c:d:e:f:g:h/n."""

    optParameters = [
        ["port", "p", "tcp:8080", "strports description of the port to listen on."],
        [
            "path",
            None,
            None,
            "Directory to serve.  Without it, allowed peers get 404.",
        ],
    ]

    optFlags = [
        ["default-allow", None, "Allow peers which match no rule."],
    ]

    compData = usage.Completions(optActions={"path": usage.CompleteDirs()})

    def __init__(self) -> None:
        usage.Options.__init__(self)
        self["rules"] = []

    def _addRule(self, action, pattern):
        # Checked here only so that a bad pattern is a usage error;
        # makeService compiles the rules.
        try:
            parsePattern(pattern)
        except InvalidPatternError as e:
            raise usage.UsageError(str(e))
        self["rules"].append((action, pattern))

    def opt_allow(self, pattern):
        """
        Allow peers matching this pattern, unless an earlier rule matched
        them.  May be given more than once.
        """
        self._addRule(Action.ALLOW, pattern)

    def opt_deny(self, pattern):
        """
        Deny peers matching this pattern, unless an earlier rule matched
        them.  May be given more than once.
        """
        self._addRule(Action.DENY, pattern)

    def postOptions(self):
        path = self["path"]
        if path is not None and not os.path.isdir(path):
            raise usage.UsageError(f"{path!r} is not a directory")


def makeService(config: Options) -> service.IService:
    controller = AccessController.fromRules(
        config["rules"], defaultAllow=bool(config["default-allow"])
    )
    if config["path"] is None:
        root = None
    else:
        root = static.File(os.path.abspath(config["path"]))
    site = server.Site(AccessControlResource(controller, root))
    return strports.service(config["port"], site)
