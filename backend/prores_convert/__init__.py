"""
ProRes 4444 XQ conversion service.

Accepts video uploads, converts them to QuickTime ProRes 4444 XQ via an
external ffmpeg process, and exposes job status and download over HTTP.
"""

__version__ = "0.1.0"
