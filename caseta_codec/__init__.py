"""
caseta_codec - decodes Pico remote events from a Lutron Caseta bridge's
telnet integration interface.
"""

__version__ = "0.1.0"
