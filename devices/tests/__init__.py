"""
Copyright (c) 2025. All rights reserved.
"""

"""
Tests for the devices package.
"""
