"""shorty - manage your shell aliases from one plain-text file"""

__version__ = "0.6.0"
