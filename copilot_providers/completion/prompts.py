"""Prompt templates and response cleanup for inline completion.

Language templates are keyed by editor language id; unknown languages fall
back to the javascript template. ``build_completion_prompt`` wraps the code
around the cursor in a fixed layout with a ``[CURSOR]`` marker and an
instruction list; ``clean_completion`` undoes the Markdown the model tends to
add anyway.
"""
from __future__ import annotations

import re
from typing import Dict

LANGUAGE_PROMPTS: Dict[str, str] = {
    "javascript": (
        "You are an expert JavaScript/TypeScript coding assistant.\n"
        "- Follow Google JavaScript Style Guide\n"
        "- Use modern ES2022+ syntax (async/await, optional chaining, nullish coalescing)\n"
        "- Prefer const/let, never use var\n"
        "- Use arrow functions for callbacks\n"
        "- Add JSDoc for complex functions\n"
        "- Handle errors gracefully"
    ),
    "typescript": (
        "You are an expert TypeScript assistant.\n"
        "- Emit type-safe code with proper interfaces/types\n"
        "- Use generics appropriately\n"
        "- Enable strict mode compatible code\n"
        "- Prefer readonly where applicable\n"
        "- Return explicit types, avoid 'any'\n"
        "- Use utility types (Pick, Omit, Partial)"
    ),
    "python": (
        "You are a Python expert.\n"
        "- Follow PEP 8 style guide\n"
        "- Use type hints for all functions\n"
        "- Prefer list/dict comprehensions\n"
        "- Handle exceptions with try/except/finally\n"
        "- Use snake_case for functions, PascalCase for classes\n"
        "- Import only standard library unless necessary\n"
        "- Add docstrings for functions"
    ),
    "jsx": (
        "You are a React JSX expert.\n"
        "- Use functional components with hooks\n"
        "- Prefer arrow functions\n"
        "- Add PropTypes or TypeScript interfaces\n"
        "- Use destructuring\n"
        "- Follow React Hooks rules"
    ),
    "tsx": (
        "You are a React TypeScript expert.\n"
        "- Use functional components with typed props\n"
        "- Use hooks with proper types\n"
        "- Follow React + TypeScript best practices\n"
        "- Prefer interfaces over types for props"
    ),
}

# Editor language ids that share a template
LANGUAGE_ALIASES: Dict[str, str] = {
    "javascriptreact": "jsx",
    "typescriptreact": "tsx",
}

FALLBACK_LANGUAGE = "javascript"

CURSOR_MARKER = "[CURSOR]"

_PROMPT_LAYOUT = """{lang_prompt}

## Current Code Context:
```{lang}
{before}{cursor}{after}
```

## Instructions:
1. Complete the code at {cursor}
2. Respond with ONLY code, no explanations
3. Ensure the code is syntactically correct
4. Match the existing code style and indentation"""

_FENCED = re.compile(r"```[a-z]*\n?([\s\S]*?)```")
_LEADING_BLANK = re.compile(r"^\s*\n")
_TRAILING_BLANK = re.compile(r"\n\s*\Z")


def get_language_prompt(language_id: str) -> str:
    key = LANGUAGE_ALIASES.get(language_id, language_id)
    return LANGUAGE_PROMPTS.get(key, LANGUAGE_PROMPTS[FALLBACK_LANGUAGE])


def build_completion_prompt(language_id: str, before_cursor: str, after_cursor: str) -> str:
    """Return the full prompt for the code around the cursor."""
    return _PROMPT_LAYOUT.format(
        lang_prompt=get_language_prompt(language_id),
        lang=language_id,
        before=before_cursor,
        after=after_cursor,
        cursor=CURSOR_MARKER,
    )


def clean_completion(text: str) -> str:
    """Strip code fences and surrounding blank lines; ``""`` means no suggestion."""
    text = _FENCED.sub(r"\1", text)
    text = text.replace("```", "")
    text = _LEADING_BLANK.sub("", text, count=1)
    text = _TRAILING_BLANK.sub("", text, count=1)
    return text.strip()


__all__ = [
    "LANGUAGE_PROMPTS",
    "LANGUAGE_ALIASES",
    "CURSOR_MARKER",
    "get_language_prompt",
    "build_completion_prompt",
    "clean_completion",
]
