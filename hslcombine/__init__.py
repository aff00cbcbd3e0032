"""
Combine three grayscale images into one color image through HSL.

Each input's brightness drives one HSL component of the output:
- colorspace: brightness policy, HSL ↔ RGB conversion, fixed-point helpers
- canvas: HSL pixel buffer, channel assignment and hue rotation
- decode: format-sniffing image decoders
- fusion: dimension scan and three-way compositing
- main: command line entry point and JPEG output
"""

__version__ = "1.0.0"
