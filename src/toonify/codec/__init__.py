"""TOON codec wrapper."""

from toonify.codec.toon import Codec, ToonCodec, decode_from_toon, encode_to_toon

__all__ = ["Codec", "ToonCodec", "decode_from_toon", "encode_to_toon"]
