"""Normalization kernel: version detection, parameter merge, document state."""
