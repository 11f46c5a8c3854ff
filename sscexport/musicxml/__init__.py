from .parser import parse_musicxml_timing

__all__ = ["parse_musicxml_timing"]
