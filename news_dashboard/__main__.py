#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Entry point for running the dashboard as a module.
Allows execution via: python -m news_dashboard
"""

from news_dashboard import run_cli

if __name__ == "__main__":
    run_cli()
