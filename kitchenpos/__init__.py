"""
                Kitchen POS

Restaurant point-of-sale backend: menus, order tables, table groups
and the order lifecycle behind a FastAPI REST interface.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
