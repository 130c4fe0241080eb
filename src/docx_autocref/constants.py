"""
Centralized constants for OOXML namespaces, part names and other magic values.

Import from here rather than repeating namespace URLs or part names across
modules.
"""

# =============================================================================
# Word Processing Namespaces
# =============================================================================

# Main WordprocessingML namespace (Word 2007+)
WORD_NAMESPACE = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"


# =============================================================================
# Package Parts
# =============================================================================

# Body text part
DOCUMENT_PART = "word/document.xml"

# Footnote text part
FOOTNOTES_PART = "word/footnotes.xml"


# =============================================================================
# Cross-Reference Grammar
# =============================================================================

# Directional keywords, matched with the first letter in either case
KEYWORDS = ("supra", "infra")

# Longest first so "notes" wins over "note"
NOTE_WORDS = ("notes", "note")

# Characters allowed to separate the two numbers of a range (hyphen, en dash)
RANGE_SEPARATORS = ("-", "\u2013")

# Whitespace allowed between "note(s)" and the first number
# (space, no-break space, narrow no-break space)
CONNECTIVE_SPACES = (" ", "\u00a0", "\u202f")

# Footnote numbers longer than this are rejected as malformed
MAX_NUMBER_DIGITS = 9

# Placeholder character for non-text content (tabs, breaks, footnote marks)
OBJECT_PLACEHOLDER = "\ufffc"


# =============================================================================
# Fields and Bookmarks
# =============================================================================

# Field type used for footnote cross-references
NOTEREF_FIELD = "NOTEREF"

# Word's prefix for hidden cross-reference bookmarks
REF_BOOKMARK_PREFIX = "_Ref"

# Digits after the prefix: "_Ref000000001" is 13 characters
REF_BOOKMARK_DIGITS = 9

# Field encodings
FIELD_STYLE_SIMPLE = "simple"
FIELD_STYLE_COMPLEX = "complex"
FIELD_STYLES = (FIELD_STYLE_SIMPLE, FIELD_STYLE_COMPLEX)


# =============================================================================
# Environment
# =============================================================================

# Environment variable holding the CLI verbosity
VERBOSITY_ENV = "AUTOCREF_VERBOSITY"

# Default CLI verbosity (0 critical .. 5 debug)
DEFAULT_VERBOSITY = 3


# =============================================================================
# Helper Functions
# =============================================================================


def w(tag: str) -> str:
    """Create a fully qualified Word namespace tag.

    Args:
        tag: Tag name without namespace prefix (e.g., "p", "r", "t")

    Returns:
        Fully qualified tag (e.g., "{http://...wordprocessingml/2006/main}p")

    Example:
        >>> w("fldSimple")
        '{http://schemas.openxmlformats.org/wordprocessingml/2006/main}fldSimple'
    """
    return f"{{{WORD_NAMESPACE}}}{tag}"
