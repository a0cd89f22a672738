"""
fingerspell: webcam fingerspelling recognition by nearest-neighbour matching
of hand landmarks against user-trained reference samples.
"""
__version__ = "0.1.0"
