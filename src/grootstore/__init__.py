"""
grootstore — vendor root store acquisition and normalization.

Downloads the root certificate stores published by Apple, Chromium,
Microsoft and Mozilla (NSS), normalizes each into a single PEM file
and parses it into an in-memory trust pool.

Built on the Railway-Oriented Programming (ROP) helpers in `railway`:
every adapter returns a Result instead of raising.
"""

__version__ = "0.1.0"
