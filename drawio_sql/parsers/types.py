"""Mapping of free-text diagram types to PostgreSQL type spellings."""

import logging
import re

logger = logging.getLogger(__name__)

DEFAULT_TYPE = "TEXT"

TYPE_SYNONYMS: dict[str, str] = {
    # Numeric
    "BIGINT": "BIGINT",
    "INT8": "BIGINT",
    "INTEGER": "INTEGER",
    "INT": "INTEGER",
    "INT4": "INTEGER",
    "SMALLINT": "SMALLINT",
    "INT2": "SMALLINT",
    "NUMERIC": "NUMERIC",
    "DECIMAL": "DECIMAL",
    "REAL": "REAL",
    "FLOAT4": "REAL",
    "FLOAT": "DOUBLE PRECISION",
    "FLOAT8": "DOUBLE PRECISION",
    "DOUBLE": "DOUBLE PRECISION",
    "DOUBLE PRECISION": "DOUBLE PRECISION",
    "SERIAL": "SERIAL",
    "SERIAL4": "SERIAL",
    "BIGSERIAL": "BIGSERIAL",
    "SERIAL8": "BIGSERIAL",
    "SMALLSERIAL": "SMALLSERIAL",
    "MONEY": "MONEY",
    # String
    "TEXT": "TEXT",
    "STRING": "TEXT",
    "VARCHAR": "VARCHAR(255)",
    "CHARACTER VARYING": "VARCHAR(255)",
    "CHAR": "CHAR(1)",
    "CHARACTER": "CHAR(1)",
    # Date/time
    "DATE": "DATE",
    "TIME": "TIME",
    "TIMETZ": "TIMETZ",
    "TIMESTAMP": "TIMESTAMP",
    "DATETIME": "TIMESTAMP",
    "TIMESTAMPTZ": "TIMESTAMPTZ",
    "TIMESTAMP WITH TIME ZONE": "TIMESTAMP WITH TIME ZONE",
    "TIMESTAMP WITHOUT TIME ZONE": "TIMESTAMP",
    "INTERVAL": "INTERVAL",
    # Boolean
    "BOOLEAN": "BOOLEAN",
    "BOOL": "BOOLEAN",
    # Identifiers and documents
    "UUID": "UUID",
    "JSON": "JSON",
    "JSONB": "JSONB",
    "XML": "XML",
    # Binary
    "BYTEA": "BYTEA",
    "BLOB": "BYTEA",
    "BINARY": "BYTEA",
    # Network
    "INET": "INET",
    "CIDR": "CIDR",
    # Arrays (generic)
    "ARRAY": "TEXT[]",
}

_VARCHAR_RE = re.compile(r"(?:VARCHAR|CHARACTER\s+VARYING)\s*\(\s*(\d+)\s*\)")
_CHAR_RE = re.compile(r"(?:CHAR|CHARACTER)\s*\(\s*(\d+)\s*\)")
_NUMERIC_RE = re.compile(r"(NUMERIC|DECIMAL)\s*\(\s*(\d+)\s*(?:,\s*(\d+)\s*)?\)")
_TIME_RE = re.compile(r"(TIME|TIMESTAMP)\s*\(\s*(\d+)\s*\)")
_ARRAY_RE = re.compile(r"(.+?)\s*\[\s*\]")
_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def map_data_type(type_text: str) -> str:
    """Map a sanitized type token to a canonical PostgreSQL type.

    Never raises and never returns an empty string. Tokens are tried as a
    known synonym, then as a parameterized or array form; an unknown bare
    identifier is kept as a custom (enum/domain) type and anything else
    becomes ``TEXT``.
    """
    if not isinstance(type_text, str):
        logger.warning("Non-text type token %r, defaulting to %s", type_text, DEFAULT_TYPE)
        return DEFAULT_TYPE

    token = type_text.strip()
    if not token:
        logger.warning("Empty type, defaulting to %s", DEFAULT_TYPE)
        return DEFAULT_TYPE

    upper = re.sub(r"\s+", " ", token.upper())
    if upper in TYPE_SYNONYMS:
        return TYPE_SYNONYMS[upper]

    varchar_match = _VARCHAR_RE.fullmatch(upper)
    if varchar_match:
        return f"VARCHAR({varchar_match[1]})"

    char_match = _CHAR_RE.fullmatch(upper)
    if char_match:
        return f"CHAR({char_match[1]})"

    numeric_match = _NUMERIC_RE.fullmatch(upper)
    if numeric_match:
        keyword, precision, scale = numeric_match.groups()
        if scale is not None:
            return f"{keyword}({precision},{scale})"
        return f"{keyword}({precision})"

    time_match = _TIME_RE.fullmatch(upper)
    if time_match:
        return f"{time_match[1]}({time_match[2]})"

    array_match = _ARRAY_RE.fullmatch(token)
    if array_match:
        # Unwrap all [] levels, then normalize the base once
        base = token
        depth = 0
        while array_match:
            base = array_match[1]
            depth += 1
            array_match = _ARRAY_RE.fullmatch(base)
        return map_data_type(base) + "[]" * depth

    if _IDENTIFIER_RE.fullmatch(token):
        logger.info("Unknown type '%s', keeping it as a custom type", token)
        return token

    logger.warning("Unknown type '%s', defaulting to %s", token, DEFAULT_TYPE)
    return DEFAULT_TYPE
