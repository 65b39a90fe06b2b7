"""
Copyright (c) 2025. All rights reserved.
"""

"""
Shared configuration, logging and utilities.
"""
