"""Text encodings of the backend wire format.

json.py renders DataType trees as the JSON objects the agal backend emits
(keyed by "class") and reads them back.
"""

from agaltypes.formats.json import from_json, to_json

__all__ = ["from_json", "to_json"]
