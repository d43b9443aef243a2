#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Mindful Moments v1.0
Core services of a personal meditation app: session playback, breathing
exercises, statistics, daily reminders and local persistence

Version: 1.0.0
"""

__version__ = "1.0.0"

from .config import AppConfig

__all__ = ['AppConfig', '__version__']
