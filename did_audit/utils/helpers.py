"""
DID-Audit Helper Functions

Display and batch-geometry helpers used by the tree builder, the CLI and
callers rendering verification traces.
"""


def format_operation_type(operation_type: str) -> str:
    """
    Turn an operation kind into a display label.

    Args:
        operation_type: e.g. "key_rotation"

    Returns:
        str: e.g. "Key Rotation"
    """
    words = operation_type.replace('_', ' ').split(' ')
    return ' '.join(word[:1].upper() + word[1:] for word in words)


def truncate_hash(hash_str: str, show_full: bool = False) -> str:
    """
    Shorten a hash for display as head...tail.

    Args:
        hash_str: Full hash string
        show_full: Return the hash unchanged

    Returns:
        str: Truncated hash (unchanged when 20 characters or fewer)
    """
    if not hash_str:
        return ""
    if show_full or len(hash_str) <= 20:
        return hash_str
    return f"{hash_str[:8]}...{hash_str[-8:]}"


def get_sibling_position(leaf_index: int, level: int) -> str:
    """
    Side of the sibling at a given level for a leaf in a positional tree.

    Returns:
        str: "right" when the path node is a left child, otherwise "left"
    """
    return "right" if ((leaf_index >> level) & 1) == 0 else "left"


def calculate_batch_size(proof_length: int) -> int:
    """Upper bound on the number of leaves in a batch with this proof length."""
    return 2 ** proof_length
