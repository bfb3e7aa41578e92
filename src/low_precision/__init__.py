"""
Low precision transformations for quantized compute graphs

Moves dequantization (convert, zero point subtract, scale multiply) from the
input of an operation to its output, so that the operation itself runs on
low precision data whenever the result stays numerically identical.
"""

__version__ = "0.1.0"
