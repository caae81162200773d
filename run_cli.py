#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Launcher for the Primel terminal helper.
Use this script to start an interactive session.
"""

import multiprocessing
from primel_cli import main

if __name__ == "__main__":
    multiprocessing.freeze_support()
    raise SystemExit(main())
