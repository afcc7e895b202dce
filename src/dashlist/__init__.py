"""
Dashlist todo service package.

The FastAPI app lives in dashlist.main, the procedure layer in
dashlist.procedures, and the client cache and dialog state in
dashlist.client and dashlist.dialogs.
"""

__version__ = "0.1.0"
