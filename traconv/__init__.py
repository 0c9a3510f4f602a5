"""
traconv - TRA <-> JSON string table converter

Converts WeiDU-style .tra string tables (``@100 = ~text~``) to flat JSON
objects and back, with cp1251 transcoding for Cyrillic tables.

Quick start:
    traconv decode --input setup.tra
    traconv encode --input setup.tra.json --encoding win1251
    traconv tree --source ./iwd2ee-src
"""

__version__ = "0.1.0"

from .converter import json_to_tra, tra_to_json
from .errors import ConversionError
from .store import EntryStore, TraEntry
from .tags import TaggedText, join_marker_tags, split_marker_tags
from .tra import TraDecoder, TraEncoder, decode_tra, encode_tra

__all__ = [
    "ConversionError",
    "EntryStore",
    "TraEntry",
    "TraDecoder",
    "TraEncoder",
    "TaggedText",
    "decode_tra",
    "encode_tra",
    "json_to_tra",
    "tra_to_json",
    "split_marker_tags",
    "join_marker_tags",
]
