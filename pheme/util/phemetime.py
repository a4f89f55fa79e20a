#!/usr/bin/env python

"""
@file pheme/util/phemetime.py
@brief Time utility class
"""

import time

class PhemeTime(object):
    """
    Time utility class. Used for generating times in "milliseconds since unix
    epoch" format, which is how chain nodes record their creation time.

    Can be used to generate string based ISO8601 (yyyy-MM-ddTHH:mm:ss.sssZ).
    """

    def __init__(self, time_in_ms=None):
        """
        @param  time_in_ms  Optional, the number of ms since the UNIX epoch (1970).
            If not given, the current time is used.
        """
        if time_in_ms is not None:
            self._time_ms = time_in_ms
        else:
            self._time_ms = self._now()

    def _now(self):
        curtime = int(round(time.time() * 1000))
        return curtime

    def _get_time_ms(self):
        return self._time_ms

    time_ms = property(_get_time_ms)

    def _get_time_str(self):
        """
        Gets the time as ISO8601 Date Format (yyyy-MM-ddTHH:mm:ss.sssZ).
        """
        # need to shift off the millis as python does not handle it well
        (secs, fracsecs) = divmod(self._time_ms, 1000)

        gmtuple = time.gmtime(secs)

        iso_time = time.strftime("%Y-%m-%dT%H:%M:%S", gmtuple)
        iso_time += '.%03dZ' % fracsecs

        return iso_time

    time_str = property(_get_time_str)

def now_ms():
    """
    @retval current time in milliseconds since the UNIX epoch
    """
    return PhemeTime().time_ms
