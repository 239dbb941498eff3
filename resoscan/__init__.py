"""
ResoScan - room acoustics measurement from a log-sweep recording.

The ``core`` subpackage holds the complete, GUI-free DSP pipeline.
"""

__version__ = "1.0.0"
