"""
Naming convention utilities for PocketBase Model Generator.

This module provides the pure string transforms used to turn collection,
field and select-value names into file names and Python identifiers.

Order matters when composing them: singularize before changing case, and
capitalize a name before splitting it into camel-case parts.
"""

import re
import unicodedata

from ..constants import (
    DATETIME_ALTERNATE_TOKEN,
    ES_PLURAL_ENDINGS,
    IRREGULAR_SINGULARS,
    OutputFiles,
    RESERVED_DATETIME_SPELLINGS,
    RESERVED_MEMBER_NAMES,
    SINGULAR_S_DENYLIST,
)


_UPPER_AFTER_LOWER_OR_DIGIT = re.compile(r"(?<=[a-z0-9])([A-Z])")


def to_snake_case(identifier: str) -> str:
    """
    Convert camelCase or PascalCase to snake_case.

    A separator is inserted only before an uppercase letter that directly
    follows a lowercase letter or a digit, so acronyms stay together.

    Example:
        >>> to_snake_case("articleData")
        'article_data'
        >>> to_snake_case("user_profile")
        'user_profile'
    """
    if not isinstance(identifier, str):
        raise TypeError(f"Expected string, got {type(identifier).__name__}")
    return _UPPER_AFTER_LOWER_OR_DIGIT.sub(r"_\1", identifier).lower()


def singularize(word: str) -> str:
    """
    Turn a plural collection name into its singular form.

    Irregular words are looked up first (case-insensitive, whole word), then
    suffix heuristics apply in priority order. This is not general English
    pluralization; unmatched words are returned unchanged.

    Example:
        >>> singularize("categories")
        'category'
        >>> singularize("children")
        'child'
        >>> singularize("bus")
        'bus'
    """
    if not isinstance(word, str):
        raise TypeError(f"Expected string, got {type(word).__name__}")

    lowered = word.lower()
    if lowered in IRREGULAR_SINGULARS:
        return IRREGULAR_SINGULARS[lowered]

    if word.endswith("ies"):
        return word[:-3] + "y"

    if word.endswith("ves"):
        return word[:-3] + "f"

    if word.endswith(ES_PLURAL_ENDINGS):
        return word[:-2]

    if word.endswith("s") and len(word) > 1 and lowered not in SINGULAR_S_DENYLIST:
        return word[:-1]

    return word


def capitalize(word: str) -> str:
    """
    Uppercase the first character of a word.

    The reserved spellings of "date time" map to a fixed alternate token so a
    generated type never shadows the built-in datetime type.
    """
    if word in RESERVED_DATETIME_SPELLINGS:
        return DATETIME_ALTERNATE_TOKEN
    if not word:
        return word
    return word[0].upper() + word[1:]


def to_identifier(words_or_snake: str) -> str:
    """
    Join snake_case parts into a camelCase identifier.

    The first non-empty part is kept exactly as given; every following part
    is passed through :func:`capitalize`.

    Example:
        >>> to_identifier("article_data")
        'articleData'
        >>> to_identifier("User_profile")
        'UserProfile'
    """
    result = ""
    for part in words_or_snake.split("_"):
        if not part:
            continue
        result = part if not result else result + capitalize(part)
    return result


def type_name(collection_name: str, suffix: str = OutputFiles.DATA_TYPE_SUFFIX) -> str:
    """
    Generate the type name for a collection.

    Example:
        >>> type_name("user_profiles", "Data")
        'UserProfileData'
    """
    return to_identifier(capitalize(singularize(collection_name))) + suffix


def enum_type_name(field_name: str) -> str:
    """
    Generate the enum class name for a select field.

    Example:
        >>> enum_type_name("payment_method")
        'PaymentMethodEnum'
        >>> enum_type_name("2fa_method")
        'Select2faMethodEnum'
    """
    name = to_identifier(_replace_non_identifier_chars(field_name)) or "select"
    if not name[0].isidentifier():
        name = "select_" + name
    return capitalize(to_identifier(name)) + OutputFiles.ENUM_TYPE_SUFFIX


def module_name(collection_name: str) -> str:
    """
    Generate the module (file stem) for a collection.

    Example:
        >>> module_name("userProfiles")
        'user_profile_data'
    """
    return to_snake_case(singularize(collection_name)) + OutputFiles.MODULE_SUFFIX


def _replace_non_identifier_chars(text: str) -> str:
    # Python NFKC-normalizes identifiers when parsing
    text = unicodedata.normalize("NFKC", text)
    return "".join(char if ("_" + char).isidentifier() else "_" for char in text)


def _to_safe_identifier(text: str, fallback: str, digit_prefix: str) -> str:
    """Normalize text into a valid, non-reserved Python identifier."""
    name = to_identifier(_replace_non_identifier_chars(text))
    if not name:
        return fallback
    if not name[0].isidentifier():
        name = digit_prefix + name
    if name in RESERVED_MEMBER_NAMES:
        name += "_"
    return name


def to_member_name(field_name: str) -> str:
    """
    Generate the model member name for a schema field.

    Example:
        >>> to_member_name("first_name")
        'firstName'
        >>> to_member_name("class")
        'class_'
    """
    return _to_safe_identifier(field_name, fallback="field", digit_prefix="f")


def to_variant_name(raw_value: str) -> str:
    """
    Generate the enum member name for a raw select value.

    Example:
        >>> to_variant_name("In Progress")
        'InProgress'
        >>> to_variant_name("1st")
        'v1st'
    """
    return _to_safe_identifier(raw_value, fallback="empty", digit_prefix="v")
