"""
feedtools: resolve a Steam title, fetch its content bundle, deploy it into the
local Steam installation and restart the related processes.
"""

__version__ = "1.2.0"
