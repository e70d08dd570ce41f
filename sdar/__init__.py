"""
Copyright (c) 2020, the SDAR developers
See LICENSE for details
"""


class SdarError(Exception):
    pass
