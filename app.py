"""
Redirect file for Streamlit Cloud compatibility.
This file exists to maintain compatibility with deployments that expect
app.py as the entry point.

The actual application code is in Welcome.py.
"""

import sys
import os

# Ensure the current directory is in the path
sys.path.insert(0, os.path.dirname(__file__))

# Import the Welcome module which contains the actual app
import Welcome  # noqa: E402,F401
