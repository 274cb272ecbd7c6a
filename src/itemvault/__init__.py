"""ItemVault — personal item records behind token authentication.

Users register and log in, then keep a private list of items (name,
amount, optional product, image, date and time). Every item belongs to
exactly one account and is only ever visible to that account.
"""

__version__ = "0.1.0"
