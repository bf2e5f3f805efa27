"""
Messages — Id computation and gettext rendering for {msg} nodes.

- ids: placeholder names and deterministic message ids
- pomsg: PO representability checks, msgid / msgid_plural
"""

from .ids import (
    set_placeholders_and_id,
    placeholder_names,
    compute_id,
    base_placeholder_name,
    to_upper_underscore,
)
from .pomsg import validate, msgid, msgid_plural, plural_node

__all__ = [
    'set_placeholders_and_id',
    'placeholder_names',
    'compute_id',
    'base_placeholder_name',
    'to_upper_underscore',
    'validate',
    'msgid',
    'msgid_plural',
    'plural_node',
]
