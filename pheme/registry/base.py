#!/usr/bin/env python

"""
@file pheme/registry/base.py
@brief interface of handle registries: per handle pointer, profile and owner
"""

from zope.interface import Interface


class IRegistry(Interface):
    """
    Registry of handles. Every operation returns a Task whose estimate()
    prices the call (0 for reads) and whose execute() performs it.
    """

    def register(handle):
        """
        @retval Task registering handle for the current account with an
            empty pointer
        """

    def get_pointer(handle):
        """
        @retval Task, executes to the head address of handle or ''
        """

    def set_pointer(handle, value=''):
        """
        @retval Task setting the head address of handle ('' for no content)
        """

    def get_profile(handle):
        """
        @retval Task, executes to the profile address of handle or ''
        """

    def set_profile(handle, value=''):
        """
        @retval Task setting the profile address of handle
        """

    def get_owner(handle):
        """
        @retval Task, executes to the owner of handle or ''
        """

    def set_owner(handle, value=''):
        """
        @retval Task transferring handle to another owner
        """

    def get_handle_at(index):
        """
        @retval Task, executes to the handle registered at position index
        """

    def get_handle_count():
        """
        @retval Task, executes to the number of registered handles
        """

    def get_handle_by_owner(owner):
        """
        @retval Task, executes to the handle owned by owner or ''
        """
