"""Dart identifier casing for database names."""

import re

_WORD_SPLIT = re.compile(r'[^a-zA-Z0-9]')

# Dart reserved words that cannot be used as property names
DART_RESERVED = frozenset({
    'assert', 'break', 'case', 'catch', 'class', 'const', 'continue', 'default',
    'do', 'else', 'enum', 'extends', 'false', 'final', 'finally', 'for', 'if',
    'in', 'is', 'new', 'null', 'rethrow', 'return', 'super', 'switch', 'this',
    'throw', 'true', 'try', 'var', 'void', 'while', 'with',
})


def to_class_name(name: str) -> str:
    """Convert snake_case or dotted names to PascalCase."""
    words = [word for word in _WORD_SPLIT.split(name) if word]
    class_name = ''.join(word[0].upper() + word[1:] for word in words)

    # Handle names that start with numbers
    if class_name and class_name[0].isdigit():
        class_name = f"T{class_name}"

    return class_name


def to_property_name(name: str) -> str:
    """Convert a column or attribute name to a camelCase Dart property."""
    class_name = to_class_name(name)
    if not class_name:
        return class_name

    property_name = class_name[0].lower() + class_name[1:]
    if property_name in DART_RESERVED:
        property_name = f"{property_name}_"

    return property_name
