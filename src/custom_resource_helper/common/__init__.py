"""Common utilities shared by the custom resource helper.

Provides the default logger construction and the logger interfaces consumed
by the dispatcher, deadline guard and response sender.
"""
