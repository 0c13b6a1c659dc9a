"""Rule tables for the tool description detectors.

Each table is a list of ``(regex, label)`` pairs. Tables are compiled once,
case-insensitively, and every rule of a table is evaluated on every input.
"""

from __future__ import annotations

import re
from typing import List, Tuple

HIDDEN_INSTRUCTION_PATTERNS = [
    # Concealment directives
    (r"\bdo not (tell|inform|alert|notify|mention)(?!\s+(to\s+)?use)", "Concealment directive"),
    (r"\bhide this\b", "Hide instruction"),
    (r"\bnot visible\b", "Visibility restriction"),
    (r"\buser (should not|must not|cannot) see\b", "User visibility restriction"),
    (r"\bdon'?t (show|display|reveal)", "Display restriction"),
    # Instruction wrapper tags
    (r"<instructions>[\s\S]*?</instructions>", "Instructions tag"),
    (r"<important>[\s\S]*?</important>", "Important tag"),
    (r"<secret>[\s\S]*?</secret>", "Secret tag"),
    (r"<system>[\s\S]*?</system>", "System tag"),
    (r"<s>[\s\S]*?</s>", "Shorthand tag"),
    # Direct overrides
    (r"\bignore (previous|all|other) instructions\b", "Instruction override"),
    (r"\binstead (do|of|you should)\b", "Alternative action"),
    (r"\balways (do|include|add|insert|append)\b", "Forced action"),
    (r"\bnever (tell|show|reveal|disclose)\b", "Forbidden disclosure"),
]

TOOL_SHADOWING_PATTERNS = [
    (r"when.*tool is (available|present)", "Condition-based override"),
    (r"override the behavior of", "Explicit override"),
    (r"instead of using", "Tool substitution"),
    (r"modify the (usage|behavior) of", "Behavior modification"),
    (r"before using (any|other|the) tool", "Pre-execution hook"),
    (r"after using (any|other|the) tool", "Post-execution hook"),
    (r"whenever you (see|encounter|use)", "Trigger-based action"),
    (r"replace (the|all) (function|tool|method)", "Replacement directive"),
    (r"\bmodify (the|how) (agent|model|tool|assistant)\b", "Agent modification"),
    (r"\bprioritize this\b", "Priority override"),
    (r"\bthis is VERY (important|VERY)", "Emphasis override"),
]

SENSITIVE_FILE_PATTERNS = [
    (r"~/\.ssh", "SSH key access"),
    (r"\.env\b", "Environment file access"),
    (r"config\.json", "Config file access"),
    (r"id_rsa\b", "Private key access"),
    (r"\.cursor/mcp\.json", "MCP config access"),
    (r"\.cursor/", "Cursor directory access"),
    (r"\bmcp\.json\b", "MCP config access"),
    (r"\bcredentials\b", "Credentials access"),
    (r"\bpassword\b", "Password access"),
    (r"\btoken\b", "Token access"),
    (r"\bsecret\b", "Secret access"),
    (r"\bapi[ \-_]?key\b", "API key access"),
    (r"\baccess[ \-_]?key\b", "Access key retrieval"),
    (r"\bauth[ \-_]?token\b", "Auth token access"),
    (r"/etc/passwd\b", "System password file access"),
    (r"/var/log\b", "System log access"),
    (r"\bread (file|content|directory|folder)", "File read operation"),
    (r"\baccess (file|content|directory|folder)", "File access operation"),
    (r"\.\.", "Path traversal attempt"),
]

# Parameter names used to smuggle data out through optional fields
SUSPICIOUS_PARAMETER_NAMES = frozenset(
    [
        "note",
        "notes",
        "feedback",
        "details",
        "extra",
        "additional",
        "metadata",
        "debug",
        "sidenote",
        "context",
        "annotation",
        "reasoning",
        "remark",
    ]
)

# Well-known servers that other servers commonly impersonate
POPULAR_MCP_SERVERS = ["whatsapp", "slack", "github", "gitlab", "gdrive"]

CompiledRules = List[Tuple[re.Pattern, str]]


def compile_rules(rules: List[Tuple[str, str]]) -> CompiledRules:
    """Compile a ``(regex, label)`` table case-insensitively."""
    return [(re.compile(pattern, re.IGNORECASE), label) for pattern, label in rules]


HIDDEN_INSTRUCTION_RULES = compile_rules(HIDDEN_INSTRUCTION_PATTERNS)
TOOL_SHADOWING_RULES = compile_rules(TOOL_SHADOWING_PATTERNS)
SENSITIVE_FILE_RULES = compile_rules(SENSITIVE_FILE_PATTERNS)
