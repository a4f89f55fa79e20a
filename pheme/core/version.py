#!/usr/bin/env python

"""
@file pheme/core/version.py
@brief sets the version for pheme classes
"""

class Version(object):
    """
    An object that represents a three-part version number.
    @note Modelled on twisted python (twisted.python.versions)
    """

    def __init__(self, package, major, minor, micro, prerelease=None):
        self.package = package
        self.major = major
        self.minor = minor
        self.micro = micro
        self.prerelease = prerelease

    def base(self):
        """
        Return a string in canonical short version format,
        <major>.<minor>.<micro>[rc<prerelease>].
        """
        if self.prerelease is None:
            pre = ""
        else:
            pre = "rc%s" % (self.prerelease,)
        return '%d.%d.%d%s' % (self.major, self.minor, self.micro, pre)

    def __str__(self):
        return '[%s, version %s]' % (self.package, self.base())

# VERSION !!! This is the main version !!!
version = Version('pheme', 0, 5, 0)
